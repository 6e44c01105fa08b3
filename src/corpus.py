"""Load document records from a YAML file or a folder of frontmatter markdown."""

import logging
from pathlib import Path

import frontmatter
import yaml

from src.models import Document

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("abstract", "methodology", "key_findings", "results", "limitations")


def _to_document(raw: dict, origin: str) -> Document:
    title = str(raw.get("title") or "").strip()
    if not title:
        raise ValueError(f"Document without a title in {origin}")
    year = raw.get("year")
    source = raw.get("source")
    return Document(
        title=title,
        **{name: str(raw.get(name) or "").strip() for name in _TEXT_FIELDS},
        year=int(year) if year is not None else None,
        source=str(source) if source is not None else origin,
    )


def _load_yaml(path: Path) -> list[Document]:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if isinstance(raw, dict):
        raw = raw.get("documents", [])
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of documents or a 'documents' key")
    return [_to_document(item, f"{path}#{i}") for i, item in enumerate(raw, start=1)]


def _load_markdown_dir(directory: Path) -> list[Document]:
    """One document per .md file; frontmatter holds the fields, the body is the abstract."""
    documents = []
    for file_path in sorted(directory.glob("*.md")):
        post = frontmatter.load(str(file_path))
        fields = dict(post.metadata)
        body = post.content.strip()
        if body and not fields.get("abstract"):
            fields["abstract"] = body
        fields.setdefault("title", file_path.stem.replace("-", " ").replace("_", " "))
        fields.setdefault("source", str(file_path))
        documents.append(_to_document(fields, str(file_path)))
    return documents


def load_corpus(path: Path) -> list[Document]:
    """Load the corpus a debate reasons about.

    Args:
        path: A ``.yaml``/``.yml`` file (list of documents, or a mapping with a
            ``documents`` list) or a directory of ``.md`` files.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the corpus is empty or a document has no title.
    """
    if not path.exists():
        raise FileNotFoundError(f"Corpus not found: {path}")

    if path.is_dir():
        documents = _load_markdown_dir(path)
    elif path.suffix.lower() in (".yaml", ".yml"):
        documents = _load_yaml(path)
    else:
        raise ValueError(f"Unsupported corpus file: {path} (use .yaml, .yml or a folder of .md files)")

    if not documents:
        raise ValueError(f"Corpus at {path} contains no documents")

    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents
