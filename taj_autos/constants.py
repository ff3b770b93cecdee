APP_NAME = "Taj Autos"

# storage
DATA_DIR = ".taj_autos"
DB_FILE_NAME = "taj_autos.db"
TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1"

# stock locations
LOCATION_SHELF = "shelf"
LOCATION_STORE = "store"
LOCATIONS = (LOCATION_SHELF, LOCATION_STORE)

# payment types
PAYMENT_CASH = "cash"
PAYMENT_CREDIT = "credit"
PAYMENT_TYPES = (PAYMENT_CASH, PAYMENT_CREDIT)

# invoice header
SHOP_NAME = "Taj Autos"
SHOP_ADDRESS = "Meri Ruby Plaza, Sadar, Karachi"
CURRENCY = "Rs."

# reporting
DEFAULT_REPORT_DAYS = 30
DASHBOARD_LOW_STOCK_LIMIT = 5
RECENT_SALES_LIMIT = 10
