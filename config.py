import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))

# Database setup
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///salon_retail.db')

# Catalog configuration
CATALOG_PATH = os.getenv('SALON_CATALOG_PATH', os.path.join(APP_DIR, 'data', 'catalog.json'))
CATALOG_LOCKED = os.getenv('SALON_CATALOG_LOCKED', 'true').strip().lower() not in ('0', 'false', 'no', 'off')

# Logging
LOG_DIR = os.getenv('SALON_LOG_DIR', os.path.join(os.path.expanduser('~'), '.salon_retail', 'logs'))
LOG_LEVEL = os.getenv('SALON_LOG_LEVEL', 'INFO')

# Key the form state is saved under (single user, single session)
PROFILE = os.getenv('SALON_PROFILE', 'default')

# Starting values for a fresh form
DEFAULT_PROMOTION = {
    'days': 7,
    'stylists': 3,
    'units_per_stylist_per_day': 2,
}

# Maximum number of saved scenarios per profile
MAX_SCENARIOS = 3

CURRENCY_SYMBOL = '£'
