"""
Component Version Service.

Version numbering, default-version management, comparisons and the
framework x CSS framework variant grid of a component.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ona_ui.core.database.entities import ComponentVersion, CssFramework, FrameworkType
from ona_ui.core.database.repositories import ComponentRepository, ComponentVersionRepository
from ona_ui.core.errors import ConflictError, NotFoundError, ValidationError
from ona_ui.core.logging_config import get_logger
from ona_ui.core.utils import bump_patch, parse_version

from .preview import compile_version

logger = get_logger(__name__)

# Nulled for callers without access to the component
SENSITIVE_FIELDS = ("code_full", "code_encrypted", "dark_mode_code", "integration_code", "files")

COMPARED_FIELDS = (
    "version_number",
    "framework",
    "css_framework",
    "code_preview",
    "code_full",
    "dependencies",
    "config_required",
    "supports_dark_mode",
    "dark_mode_code",
    "integrations",
    "integration_code",
    "files",
    "is_default",
)


def filter_sensitive(version: ComponentVersion, has_access: bool) -> Dict[str, Any]:
    """Serialize a version, dropping its code when the caller has no access."""
    data = version.model_dump()
    if not has_access:
        for field in SENSITIVE_FIELDS:
            data[field] = None
    return data


def next_version_number(existing: List[str]) -> str:
    """``1.0.0`` for the first version, otherwise the highest version with its patch bumped."""
    parsed = [version for version in (parse_version(number) for number in existing) if version is not None]
    if not parsed:
        return "1.0.0"
    major, minor, patch = max(parsed)
    return bump_patch(f"{major}.{minor}.{patch}")


class ComponentVersionService:
    """Service for the versions of one component."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.components = ComponentRepository(session)
        self.versions = ComponentVersionRepository(session)

    async def _require_component(self, component_id: str):
        component = await self.components.get_by_id(component_id)
        if component is None:
            raise NotFoundError("Component", component_id)
        return component

    async def get_version(self, component_id: str, version_id: str) -> ComponentVersion:
        version = await self.versions.get_for_component(component_id, version_id)
        if version is None:
            raise NotFoundError("Component version", version_id)
        return version

    async def list_versions(
        self,
        component_id: str,
        framework: Optional[FrameworkType] = None,
        css_framework: Optional[CssFramework] = None,
    ) -> List[ComponentVersion]:
        await self._require_component(component_id)
        return await self.versions.list_by_component(component_id, framework, css_framework)

    async def generate_version_number(self, component_id: str) -> str:
        return next_version_number(await self.versions.list_version_numbers(component_id))

    async def create_version(self, component_id: str, data: Dict[str, Any]) -> ComponentVersion:
        """
        Create a version of a component.

        The version number is generated when omitted. The first version of a
        component, or one created with ``is_default``, becomes the only default.

        Raises:
            NotFoundError: The component does not exist.
            ConflictError: The (version, framework, css framework) variant already exists.
        """
        await self._require_component(component_id)
        version_number = data.get("version_number") or await self.generate_version_number(component_id)
        framework = FrameworkType(data["framework"])
        css_framework = CssFramework(data["css_framework"])

        if await self.versions.find_variant(component_id, framework, css_framework, version_number):
            raise ConflictError(
                f"Version {version_number} already exists for {framework.value}/{css_framework.value}",
                details={"version_number": version_number},
            )

        fields = {key: value for key, value in data.items() if key not in ("version_number", "framework", "css_framework")}
        version = ComponentVersion(
            component_id=component_id,
            version_number=version_number,
            framework=framework,
            css_framework=css_framework,
            **fields,
        )
        try:
            version = await self.versions.create(version)
        except IntegrityError as e:
            raise ConflictError("Version already exists", details={"version_number": version_number}) from e
        logger.info(
            f"Created version {version.version_number} ({framework.value}/{css_framework.value}) "
            f"of component {component_id}, default={version.is_default}"
        )
        return version

    async def update_version(self, component_id: str, version_id: str, changes: Dict[str, Any]) -> ComponentVersion:
        version = await self.get_version(component_id, version_id)
        if changes.get("is_default") is False and version.is_default:
            raise ValidationError(
                "A component keeps one default version; set another version as default instead",
                details={"version_id": version_id},
            )

        candidate = (
            changes.get("version_number", version.version_number),
            FrameworkType(changes.get("framework", version.framework)),
            CssFramework(changes.get("css_framework", version.css_framework)),
        )
        if candidate != (version.version_number, version.framework, version.css_framework):
            existing = await self.versions.find_variant(component_id, candidate[1], candidate[2], candidate[0])
            if existing is not None and existing.id != version.id:
                raise ConflictError("Another version already uses this number and framework pair")

        for field, value in changes.items():
            setattr(version, field, value)
        return await self.versions.update(version)

    async def set_default(self, component_id: str, version_id: str) -> ComponentVersion:
        version = await self.get_version(component_id, version_id)
        if version.is_default:
            return version
        version = await self.versions.set_default(version)
        logger.info(f"Version {version.id} is now the default of component {component_id}")
        return version

    async def delete_version(self, component_id: str, version_id: str) -> Optional[ComponentVersion]:
        """Delete a version; returns the version promoted to default, if any."""
        version = await self.get_version(component_id, version_id)
        if await self.versions.count_for_component(component_id) <= 1:
            raise ValidationError(
                "Cannot delete the last version of a component", details={"component_id": component_id}
            )
        promoted = await self.versions.delete_version(version)
        if promoted is not None:
            logger.info(f"Promoted version {promoted.id} to default after deleting {version_id}")
        return promoted

    async def compare(self, component_id: str, version_id: str, other_id: str) -> Dict[str, Any]:
        left = await self.get_version(component_id, version_id)
        right = await self.get_version(component_id, other_id)
        differences = []
        for field in COMPARED_FIELDS:
            left_value, right_value = getattr(left, field), getattr(right, field)
            if left_value != right_value:
                differences.append({"field": field, "left": left_value, "right": right_value})
        return {"left": left, "right": right, "differences": differences, "identical": not differences}

    async def get_variants(self, component_id: str) -> List[Dict[str, Any]]:
        """The full framework x CSS framework grid with availability per cell."""
        versions = await self.list_versions(component_id)
        variants = []
        for framework in FrameworkType:
            for css_framework in CssFramework:
                matching = [v for v in versions if v.framework == framework and v.css_framework == css_framework]
                default = next((v for v in matching if v.is_default), None)
                latest = max(
                    (v.version_number for v in matching),
                    key=lambda number: parse_version(number) or (0, 0, 0),
                    default=None,
                )
                variants.append(
                    {
                        "framework": framework,
                        "css_framework": css_framework,
                        "available": bool(matching),
                        "version_count": len(matching),
                        "default_version_id": default.id if default else None,
                        "latest_version": latest,
                    }
                )
        return variants

    async def get_frameworks(self, component_id: str) -> List[Dict[str, Any]]:
        await self._require_component(component_id)
        rows = await self.versions.stats_by_variant(component_id)
        return [{"framework": fw, "css_framework": css, "count": count} for fw, css, count in rows]

    async def get_stats(self, component_id: Optional[str] = None) -> Dict[str, Any]:
        rows = await self.versions.stats_by_variant(component_id)
        by_framework: Dict[str, int] = {}
        by_css: Dict[str, int] = {}
        for framework, css_framework, count in rows:
            by_framework[framework.value] = by_framework.get(framework.value, 0) + count
            by_css[css_framework.value] = by_css.get(css_framework.value, 0) + count
        return {
            "total": sum(by_framework.values()),
            "by_framework": by_framework,
            "by_css_framework": by_css,
        }

    async def compile_preview(self, component_id: str, version_id: str) -> Dict[str, Any]:
        component = await self._require_component(component_id)
        version = await self.get_version(component_id, version_id)
        return {
            "component_id": component_id,
            "version_id": version.id,
            "framework": version.framework,
            "css_framework": version.css_framework,
            "html": compile_version(version, title=component.name),
        }
