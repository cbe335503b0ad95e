"""Template catalog, configuration, materialization and manifest endpoints."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from deploypilot.api.dependencies import (
    get_app_settings,
    get_manifest_generator,
    get_template_store,
    get_yaml_validator,
)
from deploypilot.errors import (
    PlaceholderScanError,
    TemplateInvalidError,
    TemplateNotFoundError,
    UnresolvedPlaceholdersError,
)
from deploypilot.planning import resolve_namespace
from deploypilot.shared.schemas import Placeholder
from deploypilot.templates import ConfigRecord, QuotaSpec, materialize, quota_from_placeholders, scan_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["templates"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlaceholderCatalogResponse(CamelModel):
    """Placeholders of a workload template grouped for presentation."""

    name: str
    template_file: str
    placeholders: list[Placeholder]
    categories: dict[str, list[str]]


class MaterializeRequest(CamelModel):
    """Values to substitute into a workload template."""

    values: dict[str, str] = Field(default_factory=dict)
    namespace: str | None = None
    strict: bool = False
    save: bool = False


class MaterializeResponse(CamelModel):
    """Final artifact text and its persistence outcome."""

    content: str
    namespace: str
    unresolved: list[str]
    namespace_injected: bool
    placeholders: list[Placeholder] = Field(default_factory=list)
    saved_path: str | None = None


class QuotaRequest(CamelModel):
    """Quota sizing inputs; an explicit quota overrides the calculation."""

    namespace: str | None = None
    values: dict[str, str] = Field(default_factory=dict)
    config_maps: int = 0
    secrets: int = 0
    volumes: int = 0
    quota: QuotaSpec | None = None


class ManifestResponse(CamelModel):
    file_name: str | None = None
    path: str | None = None
    content: str


@router.get("/templates")
async def list_templates():
    """List workload names that have a template directory."""
    return {"templates": get_template_store().list_workloads()}


@router.get("/templates/{name}/placeholders", response_model=PlaceholderCatalogResponse, response_model_by_alias=True)
async def get_placeholders(name: str):
    """
    Scan a workload template for placeholders.

    Raises:
        HTTPException: 404 if the template is missing, 422 if it cannot be parsed
    """
    store = get_template_store()
    try:
        template_file = store.find_template_file(name)
        catalog = scan_template(template_file.read_text(encoding="utf-8"))
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except PlaceholderScanError as e:
        logger.warning(f"Placeholder scan failed for {name}: {e.context}")
        raise HTTPException(status_code=422, detail=e.format_message()) from e

    return PlaceholderCatalogResponse(
        name=name,
        template_file=store.relative_path(template_file),
        placeholders=catalog.placeholders,
        categories={
            category.value: [p.name for p in members]
            for category, members in catalog.by_category().items()
        },
    )


@router.get("/templates/{name}/config/{version}", response_model=ConfigRecord)
async def get_config(name: str, version: str):
    """Return the stored config record of a workload version."""
    try:
        record = get_template_store().read_config(name, version)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.format_message()) from e
    if record is None:
        raise HTTPException(status_code=404, detail=f"No config for {name} {version}")
    return record


@router.put("/templates/{name}/config/{version}", response_model=ConfigRecord)
async def save_config(name: str, version: str, record: ConfigRecord):
    """Store the config record of a workload version."""
    store = get_template_store()
    try:
        if not store.workload_dir(name).is_dir():
            raise TemplateNotFoundError(f"Workload not found: {name}")
        store.save_config(name, version, record)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return record


@router.post("/templates/{name}/{version}/materialize", response_model=MaterializeResponse, response_model_by_alias=True)
async def materialize_template(name: str, version: str, request: MaterializeRequest):
    """
    Substitute values into a workload template and optionally save the result.

    Values stored in the version's config record are used for any name the
    request does not supply.

    Raises:
        HTTPException: 404 if the template is missing, 422 if the result is
            invalid or (in strict mode) placeholders remain
    """
    store = get_template_store()
    try:
        template = store.read_template(name)
        record = store.read_config(name, version)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e

    namespace = resolve_namespace(request.namespace, record, get_app_settings())
    values = {**(record.placeholders if record else {}), **{k.lower(): v for k, v in request.values.items()}}

    try:
        result = materialize(
            template,
            values,
            namespace=namespace,
            strict=request.strict,
            validator=get_yaml_validator(),
        )
        catalog = scan_template(template).with_values(values)
    except (TemplateInvalidError, UnresolvedPlaceholdersError, PlaceholderScanError) as e:
        logger.warning(f"Materialization failed for {name} {version}: {e.message}")
        raise HTTPException(status_code=422, detail=e.format_message()) from e

    saved_path = None
    if request.save:
        path = store.save_final(name, version, result.content)
        get_yaml_validator().validate_file(path)
        saved_path = store.relative_path(path)

    return MaterializeResponse(
        content=result.content,
        namespace=namespace,
        unresolved=result.unresolved,
        namespace_injected=result.namespace_injected,
        placeholders=catalog.placeholders,
        saved_path=saved_path,
    )


@router.post("/templates/{name}/{version}/quota", response_model=ManifestResponse, response_model_by_alias=True)
async def generate_quota(name: str, version: str, request: QuotaRequest):
    """
    Generate ``<name>-<version>-quota.yaml`` into the workload's scripts directory.

    Quota sizes come from the request, or are calculated from the resolved
    placeholder values (replicas, cpu_*, memory_*).
    """
    store = get_template_store()
    try:
        if not store.workload_dir(name).is_dir():
            raise TemplateNotFoundError(f"Workload not found: {name}")
        record = store.read_config(name, version)
    except TemplateNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e

    namespace = resolve_namespace(request.namespace, record, get_app_settings())
    quota = request.quota
    if quota is None:
        values = {**(record.placeholders if record else {}), **request.values}
        quota = quota_from_placeholders(
            values,
            config_maps=request.config_maps,
            secrets=request.secrets,
            volumes=request.volumes,
        )

    try:
        path = get_manifest_generator().generate_quota(name, version, namespace, quota)
    except TemplateInvalidError as e:
        raise HTTPException(status_code=422, detail=e.format_message()) from e

    return ManifestResponse(
        file_name=path.name,
        path=store.relative_path(path),
        content=path.read_text(encoding="utf-8"),
    )


@router.get("/namespaces/{namespace}/manifest", response_model=ManifestResponse, response_model_by_alias=True)
async def namespace_manifest(namespace: str, name: str = ""):
    """Render a Namespace manifest without persisting it."""
    try:
        content = get_manifest_generator().render_namespace(namespace, name=name)
    except TemplateInvalidError as e:
        raise HTTPException(status_code=422, detail=e.format_message()) from e
    return ManifestResponse(content=content)
