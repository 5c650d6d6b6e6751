from pathlib import Path

from crowbar.logging_config import logger
from .config import validate_extension
from .rust_parser import parse_rust
from .tree import SyntaxTree


def parse(text: str) -> SyntaxTree:
    """
    Parses Rust source text into a lossless syntax tree.

    Pure: the same text always produces an equivalent tree and nothing is
    cached between calls.

    Raises:
        ParseError: With category and line/column of the first problem.
    """
    tree = parse_rust(text)
    logger.debug(f"Parsed {len(text)} characters")
    return tree


def read_source(file_path: Path) -> str:
    """
    Reads a source file after checking its extension is supported.

    Newlines are kept as written so CRLF files round-trip unchanged.

    Raises:
        ConfigError: Unsupported extension.
        OSError, UnicodeDecodeError: Unreadable file.
    """
    file_path = Path(file_path)
    validate_extension(file_path.suffix)
    with open(file_path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def parse_file(file_path: Path) -> SyntaxTree:
    """
    Reads and parses a single Rust file.
    """
    logger.debug(f"Parsing file: {file_path}")
    return parse(read_source(file_path))
