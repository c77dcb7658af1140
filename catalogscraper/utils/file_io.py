import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from catalogscraper.core.constants import EXPORT_FORMATS
from catalogscraper.core.errors import ExportError
from catalogscraper.core.logging import log
from catalogscraper.core.models import Product


def safe_read_json(path: Path, default: Any = None) -> Any:
    """
    Safely read a JSON file with robust error handling.
    """
    if default is None:
        default = {}

    try:
        if path.exists():
            content = path.read_text(encoding="utf-8")
            if not content.strip():
                return default
            return json.loads(content)
    except json.JSONDecodeError as e:
        log(f"Corrupted JSON in {path.name}: {e}", level="error")
    except PermissionError as e:
        log(f"Permission denied reading {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error reading {path.name}: {e}", level="warning")

    return default


def safe_write_json(path: Path, data: Any) -> bool:
    """
    Safely write data to a JSON file, ensuring parent directories exist.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return True
    except PermissionError as e:
        log(f"Permission denied writing to {path.name}: {e}", level="error")
    except OSError as e:
        log(f"IO error writing to {path.name}: {e}", level="error")

    return False


def _records(products: Sequence[Product]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in products]


def render_json(products: Sequence[Product]) -> str:
    return json.dumps(_records(products), indent=2, ensure_ascii=False)


def render_csv(products: Sequence[Product]) -> str:
    """Header is the union of record keys in first-seen order."""
    records = _records(products)
    keys: Dict[str, None] = {}
    for record in records:
        for key in record:
            keys.setdefault(key, None)

    if not keys:
        return ""

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(keys), restval="", lineterminator="\n")
    writer.writeheader()
    for record in records:
        # Booleans are written the way they appear in the JSON export
        writer.writerow({
            k: (str(v).lower() if isinstance(v, bool) else v) for k, v in record.items()
        })
    return buffer.getvalue()


def render(products: Sequence[Product], fmt: str = "json") -> str:
    if fmt == "json":
        return render_json(products)
    if fmt == "csv":
        return render_csv(products)
    raise ExportError(f"Unsupported format '{fmt}'. Choose one of: {', '.join(EXPORT_FORMATS)}")


def export_products(products: Sequence[Product], path: Path, fmt: str = "json") -> Path:
    """Serialize the whole product list at once and overwrite the output file."""
    output = render(products, fmt)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(output, encoding="utf-8")
    log(f"Wrote {len(products)} products to {path}", level="debug", output=str(path), format=fmt)
    return path
