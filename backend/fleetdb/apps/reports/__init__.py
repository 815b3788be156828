from . import schemas  # noqa: F401
