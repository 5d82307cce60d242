"""
Write the OpenAPI schema of the Todo API to a JSON file.

The application is built against a throwaway in-memory database, so no
database server is needed and no connection is opened.

Usage:
    todo-api openapi [--output interfaces/openapi.json]
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from .db import Database
from .main import create_app, openapi_tags
from .settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema carries the tag metadata declared in main,
    without overriding tags already present.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


def build_schema() -> Dict[str, Any]:
    database = Database("sqlite://")
    try:
        schema = create_app(settings=get_settings(), database=database).openapi()
    finally:
        database.dispose()
    _ensure_tags(schema)
    return schema


# PUBLIC_INTERFACE
def generate_openapi(output: Optional[str] = None) -> str:
    """Generate the OpenAPI schema file and return the written file path."""
    out_path = output or DEFAULT_OUTPUT
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(build_schema(), f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", out_path)
    return out_path
