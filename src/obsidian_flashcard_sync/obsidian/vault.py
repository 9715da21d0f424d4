"""Resolve and read notes inside an Obsidian vault."""

from dataclasses import dataclass
from pathlib import Path

from ..exceptions import DocumentError


@dataclass(frozen=True)
class VaultDocument:
    """A markdown note addressed by its vault-relative POSIX path."""

    vault_path: Path
    path: str

    @property
    def absolute_path(self) -> Path:
        return self.vault_path / self.path

    def read_text(self) -> str:
        """Note text with line endings exactly as stored."""
        try:
            return self.absolute_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Failed to read note: {self.path}"
            raise DocumentError(msg, context={"path": str(self.absolute_path)}) from e


def vault_name(vault_path: Path) -> str:
    """Obsidian names a vault after its folder."""
    return Path(vault_path).resolve().name


def resolve_document(vault_path: Path, file: Path) -> VaultDocument:
    """Locate ``file`` (absolute or vault-relative) inside the vault.

    Raises:
        DocumentError: If the file is missing, outside the vault or not markdown
    """
    vault = Path(vault_path).expanduser().resolve()
    candidate = Path(file).expanduser()
    if not candidate.is_absolute():
        candidate = candidate if candidate.exists() else vault / candidate
    candidate = candidate.resolve()

    if candidate.suffix.lower() != ".md":
        msg = f"Not a markdown note: {file}"
        raise DocumentError(msg, suggestion="Only .md files can be synced.")
    if not candidate.is_file():
        msg = f"Note not found: {file}"
        raise DocumentError(msg, context={"path": str(candidate)})
    try:
        relative = candidate.relative_to(vault)
    except ValueError as e:
        msg = f"Note is outside the vault: {file}"
        raise DocumentError(
            msg,
            suggestion="Pass --vault pointing at the vault that contains the note.",
            context={"vault": str(vault), "path": str(candidate)},
        ) from e

    return VaultDocument(vault_path=vault, path=relative.as_posix())
