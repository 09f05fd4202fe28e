"""
Record Store - the in-memory state engine for MCPs and profiles.

Owns the MCP collection, profiles, settings, the active profile and the
list filter / bulk selection state. Every mutation:
- runs under one re-entrant lock, so a second mutation never starts while
  the first is still persisting
- computes the new collections without touching the current ones
- persists them through the StorageManager
- commits them in memory only after persistence succeeded

The last failure message is kept in ``error``.
"""

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from core.duplicate_detector import check_for_duplicates, generate_unique_name
from core.errors import (
    ImportFormatError,
    MCPNotFoundError,
    NoActiveProfileError,
    PersistenceError,
    ProfileNotFoundError,
    ValidationError,
)
from core.normalizer import (
    export_document,
    export_profile_document,
    parse_import,
    parse_profile_document,
)
from core.storage_manager import StorageManager
from models.backup import Backup
from models.mcp import MCP
from models.profile import Profile
from models.settings import Settings
from models.state import ImportResult, MCPFilters
from utils.constants import (
    DEFAULT_PROFILE_DESCRIPTION,
    DEFAULT_PROFILE_NAME,
    ERROR_MESSAGES,
)
from utils.validators import validate_name

logger = logging.getLogger(__name__)

_PROFILE_ALIASES = {"mcpIds": "mcp_ids", "isDefault": "is_default"}
_PROFILE_EDITABLE = {"name", "description", "mcp_ids", "is_default"}


class RecordStore:
    """Single source of truth for MCPs, profiles, settings and selection state."""

    def __init__(self, storage: StorageManager):
        self._storage = storage
        self._lock = threading.RLock()

        self._mcps: List[MCP] = []
        self._profiles: List[Profile] = []
        self._settings = Settings()
        self._selected_profile: Optional[Profile] = None
        self._filters = MCPFilters()
        self._selected_ids: List[str] = []

        self.is_loading = False
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def storage(self) -> StorageManager:
        return self._storage

    @property
    def mcps(self) -> List[MCP]:
        with self._lock:
            return copy.deepcopy(self._mcps)

    @property
    def profiles(self) -> List[Profile]:
        with self._lock:
            return copy.deepcopy(self._profiles)

    @property
    def settings(self) -> Settings:
        with self._lock:
            return copy.deepcopy(self._settings)

    @property
    def selected_profile(self) -> Optional[Profile]:
        with self._lock:
            return copy.deepcopy(self._selected_profile)

    @property
    def filters(self) -> MCPFilters:
        with self._lock:
            return copy.deepcopy(self._filters)

    @property
    def selected_ids(self) -> List[str]:
        with self._lock:
            return list(self._selected_ids)

    def get_mcp(self, mcp_id: str) -> Optional[MCP]:
        with self._lock:
            mcp = self._find_mcp(mcp_id)
            return copy.deepcopy(mcp) if mcp else None

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        with self._lock:
            profile = self._find_profile(profile_id)
            return copy.deepcopy(profile) if profile else None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str):
        """Serialize a mutation and record its failure in the error slot."""
        with self._lock:
            nested = self.is_loading
            self.is_loading = True
            if not nested:
                self.error = None
            try:
                yield
            except Exception as e:
                self.error = str(e)
                if not nested:
                    logger.error(f"{name} failed: {e}")
                raise
            finally:
                self.is_loading = nested

    def _find_mcp(self, mcp_id: str) -> Optional[MCP]:
        return next((mcp for mcp in self._mcps if mcp.id == mcp_id), None)

    def _find_profile(self, profile_id: str) -> Optional[Profile]:
        return next((p for p in self._profiles if p.id == profile_id), None)

    def _commit_mcps(self, mcps: List[MCP]) -> None:
        self._storage.save_mcps(mcps)
        self._mcps = mcps

    def _commit_profiles(self, profiles: List[Profile]) -> None:
        self._storage.save_profiles(profiles)
        self._profiles = profiles
        self._sync_selected_profile()

    def _sync_selected_profile(self) -> None:
        """Point the active profile snapshot at the committed profile with the same id."""
        if self._selected_profile is None:
            return
        current = self._find_profile(self._selected_profile.id)
        if current is not None:
            self._selected_profile = current

    def _auto_backup(self, description: str) -> None:
        """Snapshot after a committed change; a failed snapshot is recorded, not raised."""
        if not self._settings.auto_backup:
            return
        try:
            self._storage.create_backup(description)
        except PersistenceError as e:
            logger.warning(f"Automatic backup '{description}' failed: {e}")
            self.error = str(e)

    @staticmethod
    def _coerce_mcp(data: Union[MCP, Dict[str, Any]]) -> MCP:
        if isinstance(data, MCP):
            return copy.deepcopy(data)
        if isinstance(data, dict):
            return MCP.from_dict(data)
        raise ValidationError(f"Expected an MCP or a record dict, got {type(data).__name__}")

    @staticmethod
    def _prepare_new_mcp(candidate: MCP, existing: List[MCP]) -> MCP:
        """Apply duplicate renaming and fresh identity to a record about to be added."""
        name = candidate.name
        duplicate_check = check_for_duplicates(candidate, existing)
        if duplicate_check.is_duplicate and duplicate_check.suggested_name:
            if duplicate_check.suggested_name != name:
                logger.info(f"Renaming duplicate MCP '{name}' to '{duplicate_check.suggested_name}'")
            name = duplicate_check.suggested_name

        return replace(
            candidate,
            id=str(uuid.uuid4()),
            name=name,
            usage_count=0,
            last_used=datetime.now()
        )

    def _add_mcp(self, candidate: MCP) -> MCP:
        new_mcp = self._prepare_new_mcp(candidate, self._mcps)
        self._commit_mcps(self._mcps + [new_mcp])
        logger.info(f"MCP added: {new_mcp.name} ({new_mcp.id})")
        self._auto_backup(f"Added MCP: {new_mcp.name}")
        return copy.deepcopy(new_mcp)

    def _remove_mcps(self, ids: Iterable[str]) -> List[MCP]:
        """Delete records and prune them from every profile in one pass."""
        ids = set(ids)
        now = datetime.now()

        new_profiles = []
        touched = False
        for profile in self._profiles:
            if any(mcp_id in ids for mcp_id in profile.mcp_ids):
                new_profiles.append(replace(
                    profile,
                    mcp_ids=[mcp_id for mcp_id in profile.mcp_ids if mcp_id not in ids],
                    updated_at=now
                ))
                touched = True
            else:
                new_profiles.append(profile)

        removed = [mcp for mcp in self._mcps if mcp.id in ids]
        new_mcps = [mcp for mcp in self._mcps if mcp.id not in ids]

        self._storage.save_mcps(new_mcps)
        if touched:
            try:
                self._storage.save_profiles(new_profiles)
            except Exception:
                self._storage.save_mcps(self._mcps)
                raise

        self._mcps = new_mcps
        self._profiles = new_profiles
        if self._selected_profile is not None and any(
            mcp_id in ids for mcp_id in self._selected_profile.mcp_ids
        ):
            current = self._find_profile(self._selected_profile.id)
            self._selected_profile = current or replace(
                self._selected_profile,
                mcp_ids=[mcp_id for mcp_id in self._selected_profile.mcp_ids if mcp_id not in ids],
                updated_at=now
            )
        self._selected_ids = [mcp_id for mcp_id in self._selected_ids if mcp_id not in ids]
        return removed

    def _set_disabled(self, ids: Optional[Iterable[str]], disabled: bool) -> None:
        targets = None if ids is None else set(ids)
        new_mcps = [
            replace(mcp, disabled=disabled) if targets is None or mcp.id in targets else mcp
            for mcp in self._mcps
        ]
        self._commit_mcps(new_mcps)

    def _create_profile(
        self,
        name: str,
        mcp_ids: Optional[List[str]],
        description: str,
        is_default: bool
    ) -> Profile:
        ok, error = validate_name(name)
        if not ok:
            raise ValidationError(f"Profile: {error}")
        now = datetime.now()
        profile = Profile(
            name=name,
            mcp_ids=list(mcp_ids or []),
            description=description or "",
            is_default=is_default,
            created_at=now,
            updated_at=now
        )
        self._commit_profiles(self._profiles + [profile])
        logger.info(f"Profile created: {profile.name} with {len(profile.mcp_ids)} MCPs")
        return copy.deepcopy(profile)

    # ------------------------------------------------------------------
    # MCP operations
    # ------------------------------------------------------------------

    def add_mcp(self, data: Union[MCP, Dict[str, Any]]) -> MCP:
        """
        Add a new MCP.

        A record classified as a duplicate is renamed rather than rejected.
        The new record gets a fresh id, zero usage and the current time.

        Args:
            data: MCP instance or wire record

        Returns:
            The stored record

        Raises:
            ValidationError: If required fields are missing
            PersistenceError: If the collection could not be saved
        """
        with self._operation("add_mcp"):
            candidate = self._coerce_mcp(data)
            candidate.validate()
            return self._add_mcp(candidate)

    def add_mcp_to_profiles(
        self,
        data: Union[MCP, Dict[str, Any]],
        profile_ids: Optional[List[str]] = None
    ) -> MCP:
        """Add an MCP and append its id to each listed profile."""
        with self._operation("add_mcp_to_profiles"):
            new_mcp = self.add_mcp(data)
            targets = set(profile_ids or [])
            if targets:
                now = datetime.now()
                new_profiles = [
                    replace(p, mcp_ids=p.mcp_ids + [new_mcp.id], updated_at=now)
                    if p.id in targets and new_mcp.id not in p.mcp_ids else p
                    for p in self._profiles
                ]
                self._commit_profiles(new_profiles)
            return new_mcp

    def update_mcp(self, mcp_id: str, updates: Dict[str, Any]) -> Optional[MCP]:
        """
        Merge a partial update into an MCP.

        Unknown ids are ignored.

        Returns:
            The updated record, or None if the id is unknown
        """
        with self._operation("update_mcp"):
            existing = self._find_mcp(mcp_id)
            if existing is None:
                logger.debug(f"update_mcp: no MCP with id {mcp_id}")
                return None

            updated = existing.merged(updates)
            self._commit_mcps([updated if mcp.id == mcp_id else mcp for mcp in self._mcps])
            logger.debug(f"MCP updated: {updated.name}")
            return copy.deepcopy(updated)

    def delete_mcp(self, mcp_id: str) -> None:
        """
        Delete an MCP and remove its id from every profile.

        Raises:
            MCPNotFoundError: If the id is unknown
        """
        with self._operation("delete_mcp"):
            mcp = self._find_mcp(mcp_id)
            if mcp is None:
                raise MCPNotFoundError(mcp_id)

            self._remove_mcps([mcp_id])
            logger.info(f"MCP deleted: {mcp.name}")
            self._auto_backup(f"Deleted MCP: {mcp.name}")

    def bulk_delete_mcps(self, ids: List[str]) -> int:
        """
        Delete several MCPs, rewriting each affected profile once.

        Returns:
            Number of records removed
        """
        with self._operation("bulk_delete_mcps"):
            if not ids:
                return 0
            removed = self._remove_mcps(ids)
            self._selected_ids = []
            logger.info(f"Bulk deleted {len(removed)} MCPs")
            self._auto_backup(f"Bulk deleted {len(removed)} MCPs")
            return len(removed)

    def toggle_mcp(self, mcp_id: str) -> Optional[MCP]:
        """Flip an MCP's disabled flag."""
        with self._operation("toggle_mcp"):
            mcp = self._find_mcp(mcp_id)
            if mcp is None:
                return None
            return self.update_mcp(mcp_id, {"disabled": not mcp.disabled})

    def bulk_toggle_mcps(self, ids: List[str], enabled: bool) -> None:
        """Enable or disable all listed MCPs in one write."""
        with self._operation("bulk_toggle_mcps"):
            self._set_disabled(ids, not enabled)

    def duplicate_mcp(self, mcp_id: str) -> Optional[MCP]:
        """
        Clone an MCP under a unique name with a "duplicate" tag.

        Returns:
            The new record, or None if the id is unknown
        """
        with self._operation("duplicate_mcp"):
            mcp = self._find_mcp(mcp_id)
            if mcp is None:
                return None

            clone = replace(
                copy.deepcopy(mcp),
                name=generate_unique_name(mcp.name, self._mcps),
                tags=mcp.tags + ["duplicate"]
            )
            return self._add_mcp(clone)

    def enable_all_mcps(self) -> None:
        with self._operation("enable_all_mcps"):
            self._set_disabled(None, False)

    def increment_usage(self, mcp_id: str) -> Optional[MCP]:
        with self._operation("increment_usage"):
            mcp = self._find_mcp(mcp_id)
            if mcp is None:
                return None
            return self.update_mcp(mcp_id, {
                "usage_count": mcp.usage_count + 1,
                "last_used": datetime.now()
            })

    # ------------------------------------------------------------------
    # Profile operations
    # ------------------------------------------------------------------

    def create_profile(
        self,
        name: str,
        mcp_ids: Optional[List[str]] = None,
        description: str = "",
        is_default: bool = False
    ) -> Profile:
        """Create a profile; mcp_ids may reference ids that do not exist."""
        with self._operation("create_profile"):
            return self._create_profile(name, mcp_ids, description, is_default)

    def update_profile(self, profile_id: str, updates: Dict[str, Any]) -> Optional[Profile]:
        """
        Apply updates to a profile and refresh its updated_at.

        Accepts name, description, mcp_ids (or mcpIds) and is_default (or
        isDefault). Unknown ids are ignored.

        Raises:
            ValidationError: If updates holds a field that cannot be edited
        """
        with self._operation("update_profile"):
            profile = self._find_profile(profile_id)
            if profile is None:
                logger.debug(f"update_profile: no profile with id {profile_id}")
                return None

            changes = {_PROFILE_ALIASES.get(key, key): value for key, value in updates.items()}
            changes.pop("updated_at", None)
            changes.pop("updatedAt", None)
            unknown = set(changes) - _PROFILE_EDITABLE
            if unknown:
                raise ValidationError(f"Cannot update profile field(s): {', '.join(sorted(unknown))}")
            if "mcp_ids" in changes:
                changes["mcp_ids"] = list(changes["mcp_ids"])

            updated = replace(profile, updated_at=datetime.now(), **changes)
            self._commit_profiles([updated if p.id == profile_id else p for p in self._profiles])
            logger.info(f"Profile updated: {updated.name}")
            return copy.deepcopy(updated)

    def delete_profile(self, profile_id: str) -> None:
        """
        Delete a profile, clearing the active profile and startup default if they pointed at it.

        Raises:
            ProfileNotFoundError: If the id is unknown
        """
        with self._operation("delete_profile"):
            if self._find_profile(profile_id) is None:
                raise ProfileNotFoundError(profile_id)

            new_profiles = [p for p in self._profiles if p.id != profile_id]
            if self._settings.default_profile == profile_id:
                settings = replace(self._settings, default_profile=None)
                self._storage.save_profiles(new_profiles)
                try:
                    self._storage.save_settings(settings)
                except Exception:
                    self._storage.save_profiles(self._profiles)
                    raise
                self._profiles = new_profiles
                self._settings = settings
            else:
                self._commit_profiles(new_profiles)

            if self._selected_profile is not None and self._selected_profile.id == profile_id:
                self._selected_profile = None

            logger.info(f"Profile deleted: {profile_id}")

    def set_active_profile(self, profile_id: Optional[str]) -> None:
        """Point the active profile at profile_id (None for all MCPs); MCP state is untouched."""
        with self._lock:
            self._selected_profile = self._find_profile(profile_id) if profile_id else None

    def load_profile(self, profile_id: str) -> Optional[Profile]:
        """
        Enable exactly the MCPs listed in a profile and make it active.

        Every MCP outside the profile is disabled. Unknown profile ids are
        ignored; ids in the profile that match no MCP are skipped.
        """
        with self._operation("load_profile"):
            profile = self._find_profile(profile_id)
            if profile is None:
                logger.debug(f"load_profile: no profile with id {profile_id}")
                return None

            members = set(profile.mcp_ids)
            new_mcps = [replace(mcp, disabled=mcp.id not in members) for mcp in self._mcps]
            self._commit_mcps(new_mcps)
            self._selected_profile = profile

            logger.info(f"Switched to profile: {profile.name} ({len(profile.mcp_ids)} MCPs)")
            return copy.deepcopy(profile)

    def has_unsaved_profile_changes(self) -> bool:
        """Compare the enabled MCP ids with the active profile's ids, ignoring order."""
        with self._lock:
            if self._selected_profile is None:
                return False
            enabled = sorted(mcp.id for mcp in self._mcps if not mcp.disabled)
            return enabled != sorted(self._selected_profile.mcp_ids)

    def save_current_state_to_profile(self) -> Profile:
        """
        Overwrite the active profile's ids with the currently enabled MCPs.

        Raises:
            NoActiveProfileError: If no profile is active
        """
        with self._operation("save_current_state_to_profile"):
            if self._selected_profile is None:
                raise NoActiveProfileError(ERROR_MESSAGES["NO_ACTIVE_PROFILE"])

            enabled = [mcp.id for mcp in self._mcps if not mcp.disabled]
            profile_id = self._selected_profile.id
            updated = self.update_profile(profile_id, {"mcp_ids": enabled})
            if updated is None:
                raise ProfileNotFoundError(profile_id)
            logger.info(f"Saved current state to profile: {updated.name}")
            return updated

    # ------------------------------------------------------------------
    # Settings, filters and bulk selection
    # ------------------------------------------------------------------

    def update_settings(self, updates: Dict[str, Any]) -> Settings:
        """
        Apply attribute updates to the settings and persist them.

        Raises:
            ValidationError: If updates holds an unknown setting
        """
        with self._operation("update_settings"):
            try:
                settings = replace(self._settings, **updates)
            except TypeError as e:
                raise ValidationError(f"Unknown setting: {e}") from e
            self._storage.save_settings(settings)
            self._settings = settings
            return copy.deepcopy(settings)

    def set_filters(self, **changes: Any) -> None:
        with self._lock:
            self._filters = replace(self._filters, **changes)

    def clear_filters(self) -> None:
        with self._lock:
            self._filters = MCPFilters()

    def set_bulk_selection(self, ids: List[str]) -> None:
        with self._lock:
            self._selected_ids = list(ids)

    def clear_bulk_selection(self) -> None:
        with self._lock:
            self._selected_ids = []

    def toggle_bulk_selection(self, mcp_id: str) -> None:
        with self._lock:
            if mcp_id in self._selected_ids:
                self._selected_ids = [i for i in self._selected_ids if i != mcp_id]
            else:
                self._selected_ids = self._selected_ids + [mcp_id]

    def search_mcps(self, query: str) -> List[MCP]:
        """Match query against name, description, tags and category (case-insensitive)."""
        query = query.lower()
        with self._lock:
            return copy.deepcopy([
                mcp for mcp in self._mcps
                if query in mcp.name.lower()
                or query in (mcp.description or "").lower()
                or any(query in tag.lower() for tag in mcp.tags)
                or query in mcp.category.lower()
            ])

    def get_mcps_by_category(self, category: str) -> List[MCP]:
        with self._lock:
            return copy.deepcopy([mcp for mcp in self._mcps if mcp.category == category])

    def get_filtered_mcps(self) -> List[MCP]:
        """Apply the current filters to the MCP collection."""
        with self._lock:
            filters = self._filters
            filtered = self.search_mcps(filters.search) if filters.search else self.mcps

            if filters.category:
                filtered = [mcp for mcp in filtered if mcp.category == filters.category]
            if filters.status == "enabled":
                filtered = [mcp for mcp in filtered if not mcp.disabled]
            elif filters.status == "disabled":
                filtered = [mcp for mcp in filtered if mcp.disabled]
            if filters.tags:
                filtered = [mcp for mcp in filtered if any(tag in mcp.tags for tag in filters.tags)]
            return filtered

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_mcps(self, ids: Optional[List[str]] = None, export_format: Optional[str] = None) -> Dict[str, Any]:
        """
        Export MCPs as a named server map.

        Args:
            ids: Records to export; defaults to every enabled MCP
            export_format: claude, gemini or universal; defaults to the settings value
        """
        with self._lock:
            if ids is not None:
                wanted = set(ids)
                selected = [mcp for mcp in self._mcps if mcp.id in wanted]
            else:
                selected = [mcp for mcp in self._mcps if not mcp.disabled]
            return export_document(selected, export_format or self._settings.export_format)

    def import_mcps(self, data: Union[str, bytes, dict, list]) -> ImportResult:
        """
        Import MCPs from any supported dialect.

        Records whose name matches an existing MCP exactly update it in
        place; the rest are added with duplicate renaming. The batch is
        persisted once.

        Returns:
            ImportResult; success is False for documents that cannot be parsed
        """
        with self._operation("import_mcps"):
            try:
                parsed = parse_import(data)
            except ImportFormatError as e:
                self.error = str(e)
                logger.warning(f"Import rejected: {e}")
                return ImportResult(success=False, errors=[str(e)])

            working = list(self._mcps)
            result = ImportResult(success=True, errors=list(parsed.errors))

            for record in parsed.mcps:
                index = next((i for i, mcp in enumerate(working) if mcp.name == record.name), None)
                if index is not None:
                    existing = working[index]
                    working[index] = replace(
                        existing,
                        transport=record.transport,
                        env=record.env,
                        always_allow=record.always_allow,
                        disabled=record.disabled
                    )
                    result.mcps_updated += 1
                    result.mcp_ids.append(existing.id)
                else:
                    new_mcp = self._prepare_new_mcp(record, working)
                    working.append(new_mcp)
                    result.mcps_added += 1
                    result.mcp_ids.append(new_mcp.id)

            if result.mcp_ids:
                self._commit_mcps(working)
                total = result.mcps_added + result.mcps_updated
                logger.info(
                    f"Imported {total} MCPs ({result.mcps_added} added, {result.mcps_updated} updated)"
                )
                self._auto_backup(f"Imported {total} MCPs")

            return result

    def export_profile(self, profile_id: str) -> Dict[str, Any]:
        """
        Package a profile and its member MCPs.

        Raises:
            ProfileNotFoundError: If the id is unknown
        """
        with self._lock:
            profile = self._find_profile(profile_id)
            if profile is None:
                raise ProfileNotFoundError(profile_id)
            members = set(profile.mcp_ids)
            return export_profile_document(profile, [mcp for mcp in self._mcps if mcp.id in members])

    def import_profile(self, data: Union[str, bytes, dict]) -> Profile:
        """
        Import a profile document and its MCPs.

        Raises:
            ImportFormatError: If the document lacks a profile or mcps section
        """
        with self._operation("import_profile"):
            document = parse_profile_document(data)
            result = self.import_mcps(document["mcps"])
            if not result.success:
                raise ImportFormatError("Failed to import profile MCPs")

            profile_info = document["profile"]
            return self._create_profile(
                profile_info["name"],
                result.mcp_ids,
                profile_info["description"],
                False
            )

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def create_backup(self, description: Optional[str] = None) -> Backup:
        with self._operation("create_backup"):
            return self._storage.create_backup(description)

    def restore_backup(self, backup_id: str) -> None:
        """
        Restore a backup and reload all state from storage.

        Raises:
            BackupNotFoundError: If the id is unknown
        """
        with self._operation("restore_backup"):
            self._storage.restore_from_backup(backup_id)
            self.load_data()
            if self.error:
                raise PersistenceError(self.error)

    def get_backups(self) -> List[Backup]:
        return self._storage.get_backups()

    # ------------------------------------------------------------------
    # Data lifecycle
    # ------------------------------------------------------------------

    def load_data(self) -> None:
        """
        Load every collection from storage.

        Creates a default profile holding all MCPs when MCPs exist but no
        profile does, and activates settings.default_profile when it
        resolves. Failures are recorded in ``error`` rather than raised.
        """
        with self._lock:
            nested = self.is_loading
            self.is_loading = True
            self.error = None
            try:
                mcps = self._storage.get_mcps()
                profiles = self._storage.get_profiles()
                settings = self._storage.get_settings()

                self._mcps = mcps
                self._profiles = profiles
                self._settings = settings
                if self._selected_profile is not None:
                    self._selected_profile = self._find_profile(self._selected_profile.id)

                if not profiles and mcps:
                    self._create_profile(
                        DEFAULT_PROFILE_NAME,
                        [mcp.id for mcp in mcps],
                        DEFAULT_PROFILE_DESCRIPTION,
                        True
                    )

                if settings.default_profile:
                    default_profile = self._find_profile(settings.default_profile)
                    if default_profile is not None:
                        self._selected_profile = default_profile

                logger.info(f"Loaded {len(self._mcps)} MCPs and {len(self._profiles)} profiles")

            except Exception as e:
                self.error = str(e)
                logger.error(f"Failed to load data: {e}")
            finally:
                self.is_loading = nested

    def save_data(self) -> None:
        """Persist MCPs, profiles and settings."""
        with self._operation("save_data"):
            self._storage.save_mcps(self._mcps)
            self._storage.save_profiles(self._profiles)
            self._storage.save_settings(self._settings)

    def clear_all_data(self) -> None:
        """Erase storage and reset all in-memory state."""
        with self._operation("clear_all_data"):
            self._storage.clear_all()
            self._mcps = []
            self._profiles = []
            self._settings = Settings()
            self._filters = MCPFilters()
            self._selected_ids = []
            self._selected_profile = None
            logger.info("All data cleared")
