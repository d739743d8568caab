"""Call interception, recording and transcript formatting."""

# Submodules are imported explicitly; proxy generation loads only on wrap()/replay().

__all__: list[str] = []
