"""SQLite mod store built on the SQLAlchemy ORM.

Tables:
  - mods:      one row per tracked mod directory
  - mod_files: tracked files and their hashes (cascade on mod delete)
  - tags:      tag registry
  - mod_tags:  many-to-many link between mods and tags
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    event,
    func,
    inspect,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from modkeeper.core.errors import StoreError, StoreExistsError, StoreNotInitializedError
from modkeeper.models.mod import FileKind, Mod, ModFile, Tag
from modkeeper.store.base import ModStore

logger = logging.getLogger(__name__)

Base = declarative_base()

mod_tags = Table(
    "mod_tags",
    Base.metadata,
    Column("mod_id", Integer, ForeignKey("mods.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class ModRow(Base):
    """A tracked mod directory."""

    __tablename__ = "mods"
    # AUTOINCREMENT keeps ids of deleted mods from being handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    directory = Column(String, nullable=False, unique=True)
    source_url = Column(String, nullable=False, default="")
    version = Column(String, nullable=False, default="")
    updated = Column(DateTime, nullable=False)

    files = relationship(
        "ModFileRow",
        back_populates="mod",
        cascade="all, delete-orphan",
    )
    tags = relationship("TagRow", secondary=mod_tags, back_populates="mods")

    def __repr__(self) -> str:
        return f"<ModRow(id={self.id}, directory='{self.directory}')>"


class ModFileRow(Base):
    """A tracked file of a mod and its content hash."""

    __tablename__ = "mod_files"
    __table_args__ = (UniqueConstraint("mod_id", "path", name="uq_mod_files_mod_path"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    mod_id = Column(Integer, ForeignKey("mods.id", ondelete="CASCADE"), nullable=False)
    path = Column(String, nullable=False)
    hash = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)

    mod = relationship("ModRow", back_populates="files")

    def __repr__(self) -> str:
        return f"<ModFileRow(mod_id={self.mod_id}, path='{self.path}')>"


class TagRow(Base):
    """A tag name in the global registry."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)

    mods = relationship("ModRow", secondary=mod_tags, back_populates="tags")

    def __repr__(self) -> str:
        return f"<TagRow(id={self.id}, name='{self.name}')>"


_EXPECTED_TABLES = frozenset({"mods", "mod_files", "tags", "mod_tags"})


def _enable_foreign_keys(dbapi_connection: object, _record: object) -> None:
    """SQLite ignores foreign keys unless enabled per connection."""
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine(path: Path) -> Engine:
    engine = create_engine(f"sqlite:///{path}")
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def _as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _to_mod(row: ModRow) -> Mod:
    return Mod(
        id=row.id,
        name=row.name,
        directory_name=row.directory,
        version=row.version,
        source_url=row.source_url,
        tags=frozenset(t.name for t in row.tags),
        last_updated=_as_utc(row.updated),
    )


def _to_mod_file(row: ModFileRow) -> ModFile:
    return ModFile(
        mod_id=row.mod_id,
        relative_path=row.path,
        content_hash=row.hash,
        file_kind=FileKind(row.kind),
    )


class SqlModStore(ModStore):
    """ModStore backed by a SQLite database file.

    Each write commits immediately unless it runs inside
    :meth:`transaction`, in which case the outermost block commits.

    Args:
        path: Database file. Use :func:`open_store` to also verify the schema.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._engine = _create_engine(path)
        self._session: Session = sessionmaker(bind=self._engine)()
        self._depth = 0

    @property
    def path(self) -> Path:
        """Database file path."""
        return self._path

    # ==========================================================================
    # Session helpers
    # ==========================================================================

    @contextmanager
    def _reading(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to {action}: {e}") from e

    @contextmanager
    def _writing(self, action: str) -> Iterator[None]:
        try:
            yield
            self._session.flush()
            if self._depth == 0:
                self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise StoreError(f"Failed to {action}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        except BaseException:
            self._depth -= 1
            if self._depth == 0:
                self._session.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            try:
                self._session.commit()
            except SQLAlchemyError as e:
                self._session.rollback()
                raise StoreError(f"Failed to commit: {e}") from e

    def check_schema(self) -> None:
        """Verify the database holds an initialized schema.

        Raises:
            StoreNotInitializedError: If tables are missing or the file is
                not a readable SQLite database.
        """
        try:
            tables = set(inspect(self._engine).get_table_names())
        except SQLAlchemyError as e:
            raise StoreNotInitializedError(f"Cannot read database {self._path}: {e}") from e
        missing = _EXPECTED_TABLES - tables
        if missing:
            raise StoreNotInitializedError(
                f"Database {self._path} is not initialized (missing: {', '.join(sorted(missing))})"
            )

    def close(self) -> None:
        self._session.close()
        self._engine.dispose()

    # ==========================================================================
    # Mods
    # ==========================================================================

    def _mod_row_by_directory(self, directory_name: str) -> ModRow | None:
        return self._session.scalars(
            select(ModRow).where(ModRow.directory == directory_name)
        ).one_or_none()

    def list_mods(self) -> list[Mod]:
        with self._reading("list mods"):
            rows = self._session.scalars(select(ModRow).order_by(ModRow.directory)).all()
            return [_to_mod(r) for r in rows]

    def get_mod(self, mod_id: int) -> Mod | None:
        with self._reading(f"read mod {mod_id}"):
            row = self._session.get(ModRow, mod_id)
            return _to_mod(row) if row is not None else None

    def get_mod_by_directory(self, directory_name: str) -> Mod | None:
        with self._reading(f"read mod {directory_name}"):
            row = self._mod_row_by_directory(directory_name)
            return _to_mod(row) if row is not None else None

    def upsert_mod(self, mod: Mod) -> Mod:
        with self._writing(f"save mod {mod.directory_name}"):
            row = self._session.get(ModRow, mod.id) if mod.id is not None else None
            if row is None:
                row = self._mod_row_by_directory(mod.directory_name)
            if row is None:
                logger.debug("Creating mod row for %s", mod.directory_name)
                row = ModRow()
                self._session.add(row)
            row.name = mod.name
            row.directory = mod.directory_name
            row.source_url = mod.source_url
            row.version = mod.version
            row.updated = _to_naive_utc(mod.last_updated)
            row.tags = [self._tag_row(name) for name in sorted(mod.tags)]
            self._session.flush()
            saved = _to_mod(row)
        return saved

    def delete_mod(self, mod_id: int) -> None:
        with self._writing(f"delete mod {mod_id}"):
            row = self._session.get(ModRow, mod_id)
            if row is None:
                logger.debug("Mod %s already deleted", mod_id)
                return
            self._session.delete(row)

    # ==========================================================================
    # Files
    # ==========================================================================

    def _file_row(self, mod_id: int, relative_path: str) -> ModFileRow | None:
        return self._session.scalars(
            select(ModFileRow).where(
                ModFileRow.mod_id == mod_id,
                ModFileRow.path == relative_path,
            )
        ).one_or_none()

    def get_files(self, mod_id: int) -> list[ModFile]:
        with self._reading(f"read files of mod {mod_id}"):
            rows = self._session.scalars(
                select(ModFileRow).where(ModFileRow.mod_id == mod_id).order_by(ModFileRow.path)
            ).all()
            return [_to_mod_file(r) for r in rows]

    def upsert_file(self, mod_file: ModFile) -> None:
        with self._writing(f"save file {mod_file.relative_path}"):
            if self._session.get(ModRow, mod_file.mod_id) is None:
                msg = f"Cannot save file {mod_file.relative_path}: mod {mod_file.mod_id} not found"
                raise StoreError(msg)
            row = self._file_row(mod_file.mod_id, mod_file.relative_path)
            if row is None:
                row = ModFileRow(mod_id=mod_file.mod_id, path=mod_file.relative_path)
                self._session.add(row)
            row.hash = mod_file.content_hash
            row.kind = mod_file.file_kind.value

    def delete_file(self, mod_id: int, relative_path: str) -> None:
        with self._writing(f"delete file {relative_path}"):
            row = self._file_row(mod_id, relative_path)
            if row is not None:
                self._session.delete(row)

    def find_files_by_hash(self, content_hash: str) -> list[ModFile]:
        with self._reading("look up hash"):
            rows = self._session.scalars(
                select(ModFileRow).where(ModFileRow.hash == content_hash)
            ).all()
            return [_to_mod_file(r) for r in rows]

    # ==========================================================================
    # Tags
    # ==========================================================================

    def _tag_row(self, name: str) -> TagRow:
        row = self._session.scalars(select(TagRow).where(TagRow.name == name)).one_or_none()
        if row is None:
            logger.debug("Adding tag: %s", name)
            row = TagRow(name=name)
            self._session.add(row)
        return row

    def list_tags(self) -> list[Tag]:
        with self._reading("list tags"):
            rows = self._session.execute(
                select(TagRow.name, func.count(mod_tags.c.mod_id))
                .outerjoin(mod_tags, mod_tags.c.tag_id == TagRow.id)
                .group_by(TagRow.id)
                .order_by(TagRow.name)
            ).all()
            return [Tag(name=name, mod_count=count) for name, count in rows]

    def delete_tag(self, name: str) -> bool:
        with self._writing(f"delete tag {name}"):
            row = self._session.scalars(select(TagRow).where(TagRow.name == name)).one_or_none()
            if row is None:
                return False
            self._session.delete(row)
        return True

    def find_mods_by_tags(self, tags: Iterable[str]) -> list[Mod]:
        names = sorted(set(tags))
        with self._reading("find mods by tag"):
            rows = self._session.scalars(
                select(ModRow)
                .where(ModRow.tags.any(TagRow.name.in_(names)))
                .order_by(ModRow.directory)
            ).all()
            return [_to_mod(r) for r in rows]

    def prune_tags(self) -> list[str]:
        with self._writing("prune tags"):
            rows = self._session.scalars(
                select(TagRow).where(~TagRow.mods.any()).order_by(TagRow.name)
            ).all()
            pruned = [r.name for r in rows]
            for row in rows:
                self._session.delete(row)
        logger.debug("Deleted %d unused tags", len(pruned))
        return pruned


def initialize_store(path: Path, force: bool = False) -> Path:
    """Create an empty database.

    Args:
        path: Database file to create.
        force: Replace an existing database instead of failing.

    Returns:
        The database path.

    Raises:
        StoreExistsError: If the file exists and force is False.
        StoreError: If the file cannot be removed or created.
    """
    if path.exists():
        if not force:
            raise StoreExistsError(f"Database already exists: {path}")
        logger.info("Deleting existing database %s", path)
        try:
            path.unlink()
        except OSError as e:
            raise StoreError(f"Cannot remove existing database {path}: {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StoreError(f"Cannot create database directory {path.parent}: {e}") from e

    engine = _create_engine(path)
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StoreError(f"Cannot initialize database {path}: {e}") from e
    finally:
        engine.dispose()

    logger.info("Initialized database %s", path)
    return path


@contextmanager
def open_store(path: Path) -> Iterator[SqlModStore]:
    """Open an initialized database for the duration of a block.

    The store is always closed when the block exits.

    Raises:
        StoreNotInitializedError: If the file is missing, not a database,
            or lacks the schema.
    """
    if not path.is_file():
        raise StoreNotInitializedError(f"Database not found: {path}")

    store = SqlModStore(path)
    try:
        store.check_schema()
        yield store
    finally:
        store.close()
