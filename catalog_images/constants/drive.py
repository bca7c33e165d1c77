"""Constants for Google Drive lookups."""

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_VIEW_URL = "https://drive.google.com/uc?export=view&id={file_id}"
DRIVE_PAGE_SIZE = 1000
IMAGE_MIME_PREFIX = "image/"
