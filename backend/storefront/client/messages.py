# User-facing strings of the admin workflows.

CONNECTION_ERROR = "Connection error: {}"
SERVER_UNREACHABLE = "Could not connect to the server"

SIZE_REQUIRED = "Size is required"
STOCK_NON_NEGATIVE = "Stock must be greater than or equal to zero"
SIZES_LOAD_FAILED = "Error loading sizes"
SIZE_ADD_FAILED = "Error adding size"
SIZE_ADDED = "Size added successfully!"
STOCK_UPDATE_FAILED = "Error updating stock"
STOCK_UPDATED = "Stock updated successfully!"
SIZE_UPDATE_FAILED = "Error updating size"
SIZE_UPDATED = "Size updated successfully!"
SIZE_DELETE_FAILED = "Error removing size"
SIZE_DELETED = "Size removed successfully!"
DELETE_CONFIRMATION = (
    "Remove size \"{}\"? The size and its stock will be deleted. "
    "This action cannot be undone."
)

CATEGORIES_LOAD_FAILED = "Error loading categories"
CATEGORY_ADD_FAILED = "Error adding category"
CATEGORY_REMOVE_FAILED = "Error removing category"
CATEGORIES_ADD_FAILED = "Error adding categories"
CATEGORIES_REMOVE_FAILED = "Error removing categories"

PRODUCT_LOAD_FAILED = "Failed to load product"
PRODUCT_INVALID = "Invalid product data"
PRODUCT_SAVE_FAILED = "Failed to save changes"
PRODUCT_SAVED = "Changes saved successfully!"
UNEXPECTED_ERROR = "Unexpected error"

LOGS_LOAD_FAILED = "Error loading logs"


def failure_message(body, fallback: str) -> str:
    """Server-supplied error verbatim, or the operation's fallback."""
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback
