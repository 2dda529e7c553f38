import os

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
MAX_DIMENSION = int(os.getenv("MAX_DIMENSION", "4096"))

ALLOWED_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png")

# Fixed ring slogan and the two caption variants
SLOGAN_TEXT = os.getenv("SLOGAN_TEXT", "IMMIGRANTS MAKE AMERICA GREAT")
CAPTION_PRIMARY = os.getenv("CAPTION_PRIMARY", "STOP ICE")
CAPTION_ALTERNATE = os.getenv("CAPTION_ALTERNATE", "FUCK ICE")

# Downloads are named <EXPORT_PREFIX>-<epoch-ms>.png
EXPORT_PREFIX = os.getenv("EXPORT_PREFIX", "photo-overlay")

# Comma-separated family names tried in order for the heavy sans-serif face
# Example: FONT_FAMILIES="Inter,Roboto"
_families_env = os.getenv("FONT_FAMILIES", "")
FONT_FAMILIES = [f.strip() for f in _families_env.split(",") if f.strip()] if _families_env else [
    "Helvetica Neue",
    "Segoe UI",
    "Arial",
    "Helvetica",
    "DejaVu Sans",
]
