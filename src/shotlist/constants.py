"""Project-wide named constants.

Search and packaging policies live here instead of as inline literals so
they can be tuned and tested independently of the calls that use them.
"""

# Getty API endpoints
GETTY_API_BASE_URL: str = "https://api.gettyimages.com/v3"
GETTY_TOKEN_URL: str = "https://api.gettyimages.com/oauth2/token"
VIDEO_SEARCH_ROUTE: str = "/search/videos/editorial"
PHOTO_SEARCH_ROUTE: str = "/search/images/editorial"

# Gateway defaults applied when the caller does not supply them
DEFAULT_GATEWAY_FIELDS: str = "id,title,thumb,preview,date_created"
DEFAULT_GATEWAY_SORT_ORDER: str = "best_match"

# Per-person search policy: fetch a wide page, keep the provider's top results
FETCH_PAGE_SIZE: int = 30
RESULTS_PER_KIND: int = 5
SEARCH_FIELDS: str = "id,title,thumb,preview,comp,date_created"
SEARCH_SORT_ORDER: str = "most_popular"

# Provider rate limit: fixed pause after each person's video+photo pair
INTER_ENTITY_DELAY_SECONDS: float = 1.0

# Rendition names, in order of preference, for each normalised URL
THUMBNAIL_RENDITION: str = "thumb"
PREVIEW_RENDITION: str = "preview"
COMP_RENDITION_FALLBACK: tuple[str, ...] = ("comp", "preview")

# Phrase augmentation marker appended to the bare person name
PMCARC_MARKER: str = "PMCARC"

# Penske Media collection toggles -> Getty collection codes
COLLECTION_CODES: dict[str, str] = {
    "billboard": "blb",
    "wwd": "wom",
    "rolling_stone": "rol",
    "hollywood_reporter": "tho",
    "variety": "vrt",
}

# Bundle packaging
BUNDLE_FETCH_CONCURRENCY: int = 4
DEFAULT_CSV_FILENAME: str = "getty-metadata.csv"
DEFAULT_ZIP_FILENAME: str = "getty-images.zip"

CSV_HEADER: tuple[str, ...] = (
    "Person Name",
    "Getty File ID",
    "Media Type",
    "Title",
    "Date Created",
    "Download URL",
)
