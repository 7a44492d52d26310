"""
iocgraph.config.defaults - Default configuration values.
"""

from iocgraph.edges import DEFAULT_FROM_FIELDS, DEFAULT_LABEL_FIELDS, DEFAULT_TO_FIELDS

CONFIG_FILENAME = ".iocgraph.toml"

ENV_PREFIX = "IOCGRAPH_"

DEFAULT_CONFIG = {
    "edges": {
        "from_fields": list(DEFAULT_FROM_FIELDS),
        "to_fields": list(DEFAULT_TO_FIELDS),
        "label_fields": list(DEFAULT_LABEL_FIELDS),
    },
    "timeline": {
        # Extra strptime formats tried after ISO-8601
        "formats": [],
    },
    "output": {
        "format": "text",
    },
    "logging": {
        "debug": False,
    },
}
