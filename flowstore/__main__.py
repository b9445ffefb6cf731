"""Run the file storage activity once from a parameter file.

Usage:
    python -m flowstore PARAMS_FILE [--activity-key KEY] [--workflow-id UUID]

    Or via the console script:
    flowstore-run PARAMS_FILE

The parameter file is YAML or JSON, holding the activity parameters::

    fileStorageFunction: upload
    folder: ./inbox
    filterFile: "*.pdf"
    storageDefinition: TEMP_FOLDER

Outputs are printed as JSON on stdout. Exit status: 0 on success, 1 on a
configuration or parameter file error, 2 when the activity fails.

Environment variables: see ``FlowstoreSettings`` (prefix FLOWSTORE_).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import yaml
from pydantic import ValidationError

from flowstore.config import FlowstoreSettings
from flowstore.connector import ActivityContext, ActivityRegistry, FileStorageActivity
from flowstore.errors import ConnectorError
from flowstore.lifecycle import FileLifecycle
from flowstore.storage import StorageBackendRegistry

logger = logging.getLogger(__name__)

ACTIVITY_NAME = "file_storage"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowstore-run",
        description="Run one file storage operation (upload, download, copy, delete).",
    )
    parser.add_argument("params_file", type=Path, help="YAML or JSON parameter file")
    parser.add_argument(
        "--activity-key",
        default=ACTIVITY_NAME,
        help="Activity key, used in the ENGINE_NATIVE scope (default: %(default)s)",
    )
    parser.add_argument(
        "--workflow-id",
        type=UUID,
        default=None,
        help="Workflow id, used in the ENGINE_NATIVE scope (default: random)",
    )
    return parser


def load_params(path: Path) -> dict[str, Any]:
    """
    Load activity parameters from a YAML/JSON file.

    Raises:
        OSError: The file cannot be read
        yaml.YAMLError: The file is not valid YAML
        ValueError: The document is not a mapping
    """
    with open(path, encoding="utf-8") as f:
        params = yaml.safe_load(f)
    if not isinstance(params, dict):
        raise ValueError(f"{path} must hold a mapping of parameters")
    return params


def main(argv: list[str] | None = None) -> None:
    """Run the file storage activity once."""
    args = _parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Suppress httpx request logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Load config from environment
    try:
        settings = FlowstoreSettings()
    except ValidationError as e:
        logger.error(f"Failed to load flowstore config: {e}")
        sys.exit(1)

    try:
        params = load_params(args.params_file)
        ctx = ActivityContext(
            workflow_id=args.workflow_id or uuid4(),
            activity_id=uuid4(),
            activity_key=args.activity_key,
        )
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Failed to load parameters: {e}")
        sys.exit(1)

    storage = StorageBackendRegistry.from_settings(settings)
    registry = ActivityRegistry()
    registry.register(FileStorageActivity(FileLifecycle(storage, settings)))

    try:
        result = asyncio.run(
            registry.execute(
                ACTIVITY_NAME, params, ctx, timeout=settings.activity_timeout
            )
        )
    except ConnectorError as e:
        logger.error(f"Activity failed: {e}")
        print(json.dumps({"error": {"code": "EXECUTION_ERROR", "message": str(e)}}))
        sys.exit(2)
    finally:
        storage.close()

    if result.is_error:
        print(
            json.dumps(
                {"error": {"code": result.error_code, "message": result.error_message}}
            )
        )
        sys.exit(2)

    print(json.dumps(result.to_output_dict(), indent=2))


if __name__ == "__main__":
    main()
