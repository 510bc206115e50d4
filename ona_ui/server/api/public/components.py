"""
Public Component Endpoints.

Catalog browsing for the documentation site. Only published components are
visible; code fields of premium versions are nulled for callers without a
sufficient license.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from ona_ui.core.database.entities import ComponentStatus
from ona_ui.core.database.repositories import ComponentFilters
from ona_ui.core.models.io import ApiResponse, Paginated, ok, paginated
from ona_ui.core.models.io.components import (
    ComponentAssets,
    ComponentDetail,
    ComponentRead,
    ComponentVersionRead,
    Recommendations,
)
from ona_ui.core.models.io.files import AssetRead
from ona_ui.server.services.components import ComponentService
from ona_ui.server.services.deps import (
    OptionalUserDep,
    PublicPageDep,
    SessionDep,
    public_cache,
    public_cache_short,
)

router = APIRouter(tags=["public-components"])

SORT_PATTERN = "^(newest|popular|conversion|name)$"


def _read_all(components) -> List[ComponentRead]:
    return [ComponentRead.model_validate(component) for component in components]


@router.get(
    "",
    response_model=ApiResponse[Paginated[ComponentRead]],
    dependencies=[Depends(public_cache_short)],
    summary="List Components",
    description="Retrieve published components with optional filters, sorting and pagination.",
    response_description="A page of components.",
)
async def list_components(
    session: SessionDep,
    params: PublicPageDep,
    subcategory_id: Optional[str] = None,
    category_id: Optional[str] = None,
    is_free: Optional[bool] = None,
    is_new: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort: Optional[str] = Query(None, pattern=SORT_PATTERN, description="newest, popular, conversion or name"),
):
    """
    List published components.

    - **subcategory_id** / **category_id**: Restrict to a part of the catalog.
    - **is_free**, **is_new**, **is_featured**: Flag filters.
    - **search**: Case-insensitive substring of the component name.
    - **sort**: ``newest`` (default), ``popular``, ``conversion`` or ``name``.
    """
    filters = ComponentFilters(
        subcategory_id=subcategory_id,
        category_id=category_id,
        is_free=is_free,
        status=ComponentStatus.PUBLISHED,
        is_new=is_new,
        is_featured=is_featured,
        search=search,
    )
    page = await ComponentService(session).list_components(filters, params.page, params.limit, sort)
    return ok(paginated(page, ComponentRead.model_validate))


@router.get(
    "/search",
    response_model=ApiResponse[Paginated[ComponentRead]],
    dependencies=[Depends(public_cache_short)],
    summary="Search Components",
    description="Search published components by name.",
    response_description="A page of matching components.",
)
async def search_components(
    session: SessionDep,
    params: PublicPageDep,
    q: str = Query(..., min_length=1, max_length=100, description="Search text"),
    sort: Optional[str] = Query(None, pattern=SORT_PATTERN),
):
    filters = ComponentFilters(status=ComponentStatus.PUBLISHED, search=q)
    page = await ComponentService(session).list_components(filters, params.page, params.limit, sort)
    return ok(paginated(page, ComponentRead.model_validate))


@router.get(
    "/featured",
    response_model=ApiResponse[List[ComponentRead]],
    dependencies=[Depends(public_cache)],
    summary="Featured Components",
    description="Retrieve the newest featured components.",
    response_description="A list of components.",
)
async def get_featured(session: SessionDep, limit: int = Query(6, ge=1, le=50)):
    return ok(_read_all(await ComponentService(session).get_featured(limit)))


@router.get(
    "/popular",
    response_model=ApiResponse[List[ComponentRead]],
    dependencies=[Depends(public_cache)],
    summary="Popular Components",
    description="Retrieve the most viewed published components.",
    response_description="A list of components.",
)
async def get_popular(session: SessionDep, limit: int = Query(6, ge=1, le=50)):
    return ok(_read_all(await ComponentService(session).get_popular(limit)))


@router.get(
    "/{component_id}",
    response_model=ApiResponse[ComponentDetail],
    summary="Get Component",
    description="Retrieve a published component with the caller's access rights and its default version. Counts a view.",
    response_description="The component detail.",
    responses={
        200: {"description": "Component found"},
        404: {"description": "Component not found or not published"},
    },
)
async def get_component(component_id: str, session: SessionDep, user: OptionalUserDep):
    """
    Get component by ID.

    Code fields of the default version are only returned when **access.has_access** is true.

    - **component_id**: The unique identifier of the component.
    """
    return ok(await ComponentService(session).get_public_detail(component_id, user))


@router.get(
    "/{component_id}/preview",
    response_class=HTMLResponse,
    dependencies=[Depends(public_cache)],
    summary="Component Preview",
    description="HTML document rendering the default version of the component.",
    response_description="A standalone HTML page.",
    responses={404: {"description": "Component or default version not found"}},
)
async def get_preview(component_id: str, session: SessionDep):
    return HTMLResponse(await ComponentService(session).get_preview_html(component_id))


@router.get(
    "/{component_id}/recommendations",
    response_model=ApiResponse[Recommendations],
    dependencies=[Depends(public_cache)],
    summary="Component Recommendations",
    description="Similar, trending, new and high-conversion components related to a component.",
    response_description="Recommendation lists.",
)
async def get_recommendations(component_id: str, session: SessionDep):
    recommendations = await ComponentService(session).get_recommendations(component_id)
    return ok({key: _read_all(components) for key, components in recommendations.items()})


@router.get(
    "/{component_id}/versions",
    response_model=ApiResponse[List[ComponentVersionRead]],
    summary="Component Versions",
    description="List the versions of a published component, code fields filtered by the caller's access.",
    response_description="A list of versions.",
)
async def get_versions(component_id: str, session: SessionDep, user: OptionalUserDep):
    return ok(await ComponentService(session).get_public_versions(component_id, user))


@router.post(
    "/{component_id}/copy",
    response_model=ApiResponse[dict],
    summary="Record Copy",
    description="Count a copy of the component code.",
    response_description="The updated copy counter.",
    responses={
        200: {"description": "Copy recorded"},
        402: {"description": "A premium license is required"},
        404: {"description": "Component not found"},
    },
)
async def record_copy(component_id: str, session: SessionDep, user: OptionalUserDep):
    """
    Record a copy of the component code.

    Free components can be copied by anyone; premium ones need a license of
    at least the component's required tier.
    """
    return ok(await ComponentService(session).record_copy(component_id, user))


@router.get(
    "/{component_id}/assets",
    response_model=ApiResponse[Union[ComponentAssets, List[str]]],
    dependencies=[Depends(public_cache)],
    summary="Component Assets",
    description="Public assets uploaded for a version of a published component, the default version by default.",
    response_description="The assets with counts per type, or only their URLs.",
    responses={404: {"description": "Component or version not found"}},
)
async def get_assets(
    component_id: str,
    session: SessionDep,
    version_id: Optional[str] = Query(None, description="Version to list, the default version if omitted"),
    asset_type: str = Query("all", alias="type", pattern="^(image|video|asset|all)$", description="Asset type filter"),
    output: str = Query(
        "json", alias="format", pattern="^(json|urls)$", description="``urls`` returns only the asset URLs"
    ),
):
    result = await ComponentService(session).get_public_assets(component_id, version_id, kind=asset_type)
    if output == "urls":
        return ok([asset.url for asset in result["assets"]])
    return ok({**result, "assets": [AssetRead.model_validate(asset) for asset in result["assets"]]})
