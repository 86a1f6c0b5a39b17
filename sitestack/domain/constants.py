# Registration
META_EXTENSIONS = frozenset({".yaml", ".yml", ".json"})
ROOT_DIRECTORY = "."

# Hierarchy
INDEX_TEMPLATE_NAME = "index"

# Helpers
TITLE_SEPARATOR = " | "
ACTIVE_CLASS = "active"
ACTIVE_ATTRIBUTE = 'class="active"'

# Configuration
CONFIG_DIRNAME = ".sitestack"
CONFIG_FILENAME = "config.yml"
DEFAULT_SOURCE_DIR = "src"
DEFAULT_OUTPUT_DIR = "dist"
