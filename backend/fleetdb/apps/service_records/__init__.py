from . import models  # noqa: F401
from . import schemas  # noqa: F401
