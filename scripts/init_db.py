from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from presence_api.config import get_settings_module
from presence_api.database.bootstrap import apply_schema, list_tables
from presence_api.database.connection import DBConfig


def main() -> None:
    logging.basicConfig(level="INFO")
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    target = DBConfig.from_dict(settings.DB_CONFIG)

    apply_schema(target)
    tables = list_tables(target)
    print(
        "OK: Applied schema.sql -> "
        f"{target.user}@{target.host}:{target.port}/{target.database} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
