from __future__ import annotations

import re

PLAINTEXT = "plaintext"
_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")

_FILE_NAMES = {
    "makefile": "makefile",
    "gnumakefile": "makefile",
    "dockerfile": "shell",
    "cmakelists.txt": "makefile",
}

_EXTENSIONS = {
    "as": "actionscript",
    "c": "c",
    "h": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "cs": "csharp",
    "css": "css",
    "f": "fortran",
    "f90": "fortran",
    "for": "fortran",
    "go": "go",
    "groovy": "groovy",
    "gradle": "groovy",
    "htm": "html",
    "html": "html",
    "xhtml": "html",
    "ini": "ini",
    "cfg": "ini",
    "conf": "ini",
    "java": "java",
    "js": "javascript",
    "mjs": "javascript",
    "jsx": "javascript",
    "json": "json",
    "jl": "julia",
    "kt": "kotlin",
    "kts": "kotlin",
    "tex": "latex",
    "lisp": "lisp",
    "lsp": "lisp",
    "cl": "lisp",
    "lua": "lua",
    "mk": "makefile",
    "md": "markdown",
    "markdown": "markdown",
    "php": "php",
    "txt": PLAINTEXT,
    "py": "python",
    "pyw": "python",
    "pyi": "python",
    "rb": "ruby",
    "rs": "rust",
    "sh": "shell",
    "bash": "shell",
    "zsh": "shell",
    "smali": "smali",
    "sql": "sql",
    "toml": "toml",
    "ts": "typescript",
    "tsx": "typescript",
    "vb": "visualbasic",
    "vbs": "visualbasic",
    "xml": "xml",
    "svg": "xml",
    "yaml": "yaml",
    "yml": "yaml",
}


def language_for_path(path: str) -> str:
    """Classify a document path (or ``scheme://`` location) by language name."""
    location = _SCHEME_PATTERN.sub("", str(path or "").strip())
    file_name = location.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if not file_name:
        return PLAINTEXT
    if file_name in _FILE_NAMES:
        return _FILE_NAMES[file_name]
    stem, dot, extension = file_name.rpartition(".")
    if not dot or not stem:
        return PLAINTEXT
    return _EXTENSIONS.get(extension, PLAINTEXT)
