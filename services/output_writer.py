"""
Output Writer

Naming policy and persistence for translated documents. The default file
name for a language is its lower-cased code with '-' replaced by '_' plus
'.json' (e.g. "PT-BR" -> "pt_br.json").
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from models.document import Node

logger = logging.getLogger(__name__)


def default_file_name(language: str) -> str:
    """Return the default output file name for a language code."""
    return language.lower().replace('-', '_') + '.json'


def output_path_for(
    language: str,
    output_folder: Optional[Union[str, Path]] = None,
    target_file: Optional[Union[str, Path]] = None
) -> Path:
    """
    Resolve where the document for a language is written.

    An output folder is used only when no explicit target file is given.
    Without a folder, the explicit target file wins, falling back to the
    default name in the current directory.
    """
    if output_folder is not None and target_file is None:
        return Path(output_folder) / default_file_name(language)
    if target_file is not None:
        return Path(target_file)
    return Path(default_file_name(language))


def write_document(path: Union[str, Path], document: Node) -> Path:
    """
    Write a document as pretty-printed JSON with keys sorted.

    Parent folders are created when missing.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document.to_dict(), f, indent=2, sort_keys=True, ensure_ascii=False)
        f.write('\n')

    logger.info(f"Wrote translated document to {path}")
    return path


class FileOutputHandler:
    """Fan-out output handler writing each translated document to disk."""

    def __init__(
        self,
        output_folder: Optional[Union[str, Path]] = None,
        target_file: Optional[Union[str, Path]] = None
    ):
        self.output_folder = output_folder
        self.target_file = target_file

    def path_for(self, language: str) -> Path:
        return output_path_for(language, self.output_folder, self.target_file)

    def __call__(self, language: str, document: Node) -> None:
        write_document(self.path_for(language), document)
