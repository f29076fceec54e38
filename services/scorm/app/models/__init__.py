# Import all models so Alembic can discover them via Base.metadata
from .scorm_package import ScormPackage
from .scorm_sco import ScormSco

__all__ = [
    "ScormPackage",
    "ScormSco",
]
