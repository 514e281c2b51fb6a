"""
README exporter - rewrites the tracked-provider list between two markers
"""
import logging
from pathlib import Path
from typing import Iterable, Optional

from ..config.schema import ServiceRecord

logger = logging.getLogger(__name__)

START_MARKER = "## 📊 What's included?"
END_MARKER = "## 🛠️ How it works"

def render_provider_section(names: Iterable[str]) -> str:
    """Build the Markdown section that replaces the old provider list"""
    providers = sorted(names)
    provider_list = "\n".join(f"- {name}" for name in providers)

    return (
        f"{START_MARKER}\n\n"
        "Only services with **renewable free tiers** are listed, no one-time trials or "
        f"credit-only promos. Currently tracking **{len(providers)} providers**:\n\n"
        f"{provider_list}\n\n"
    )

def replace_section(readme: str, section: str) -> Optional[str]:
    """Replace everything from START_MARKER up to END_MARKER; None when a marker is missing"""
    start = readme.find(START_MARKER)
    end = readme.find(END_MARKER, start + len(START_MARKER)) if start != -1 else -1

    if start == -1 or end == -1:
        return None

    return readme[:start] + section + readme[end:]

def update_readme(readme_path: str, records: Iterable[ServiceRecord]) -> bool:
    """
    Rewrite the provider list of a README from snapshot records

    Returns:
        True when the file was rewritten, False when it or its markers are missing
    """
    path = Path(readme_path)
    if not path.exists():
        logger.warning(f"README not found at {path}, skipping provider list update")
        return False

    readme = path.read_text(encoding='utf-8')
    names = [record.name for record in records]
    updated = replace_section(readme, render_provider_section(names))

    if updated is None:
        logger.warning(f"README markers not found in {path}, skipping provider list update")
        return False

    path.write_text(updated, encoding='utf-8')
    logger.info(f"✅ Updated README with {len(names)} providers")
    return True
