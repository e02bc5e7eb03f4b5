"""API router — diagrams, collections, templates, import/export, sharing."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from diagramvault import config
from diagramvault.errors import NotFoundError
from diagramvault.exchange.backup import backup_filename, encode_backup
from diagramvault.exchange.importer import ImportCoordinator
from diagramvault.exchange.share import SharePayload, share_url_for
from diagramvault.exchange.single import encode_single
from diagramvault.library.builtin import builtin_diagrams, is_builtin
from diagramvault.library.detect import is_diagram_source, suggest_name
from diagramvault.library.templates import TEMPLATES
from diagramvault.storage.collection_store import CollectionStore
from diagramvault.storage.diagram_store import DiagramStore
from diagramvault.storage.kv_store import KeyValueBackend, SqliteKVStore
from diagramvault.storage.records import DiagramRecord

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_backend() -> KeyValueBackend:
    backend = SqliteKVStore(config.SQLITE_PATH)
    backend.init_db()
    return backend


def _get_stores() -> tuple[DiagramStore, CollectionStore]:
    backend = _get_backend()
    diagrams = DiagramStore(backend)
    return diagrams, CollectionStore(backend, diagrams)


def _find_diagram(diagrams: DiagramStore, diagram_id: str) -> DiagramRecord:
    """Look up a stored or built-in diagram, 404 if neither."""
    if is_builtin(diagram_id):
        return next(d for d in builtin_diagrams() if d.id == diagram_id)
    diagram = diagrams.get(diagram_id)
    if diagram is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    return diagram


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


# ── Health ──


@router.get("/health")
def health():
    return {"status": "ok"}


# ── Diagrams ──


class CreateDiagramRequest(BaseModel):
    name: str
    code: str = ""


class UpdateDiagramRequest(BaseModel):
    name: str | None = None
    code: str | None = None
    theme: str | None = None


class PasteRequest(BaseModel):
    text: str


@router.get("/diagrams")
def list_diagrams():
    """List stored diagrams in storage order."""
    diagrams, _ = _get_stores()
    return [d.to_dict() for d in diagrams.list_all()]


@router.post("/diagrams")
def create_diagram(req: CreateDiagramRequest):
    diagrams, _ = _get_stores()
    try:
        return diagrams.create(req.name, req.code).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/paste")
def create_from_paste(req: PasteRequest):
    """Create a diagram from pasted text when it looks like diagram source."""
    if not is_diagram_source(req.text):
        raise HTTPException(status_code=400, detail="Pasted text is not diagram source")
    diagrams, _ = _get_stores()
    return diagrams.create(suggest_name(req.text), req.text).to_dict()


@router.get("/diagrams/{diagram_id}")
def get_diagram(diagram_id: str):
    diagrams, _ = _get_stores()
    return _find_diagram(diagrams, diagram_id).to_dict()


@router.patch("/diagrams/{diagram_id}")
def update_diagram(diagram_id: str, req: UpdateDiagramRequest):
    diagrams, _ = _get_stores()
    fields = req.model_dump(exclude_none=True)
    try:
        return diagrams.update(diagram_id, **fields).to_dict()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Diagram not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/diagrams/{diagram_id}")
def delete_diagram(diagram_id: str):
    """Delete a diagram and drop it from every collection."""
    if is_builtin(diagram_id):
        raise HTTPException(status_code=400, detail="Built-in diagrams cannot be deleted")
    diagrams, collections = _get_stores()
    if diagrams.get(diagram_id) is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    collections.delete_diagram(diagram_id)
    return {"deleted": True, "diagram_id": diagram_id}


@router.get("/diagrams/{diagram_id}/export")
def export_diagram(diagram_id: str):
    """Download one diagram's source as a .mmd file."""
    diagrams, _ = _get_stores()
    filename, text = encode_single(_find_diagram(diagrams, diagram_id))
    return Response(content=text, media_type="text/plain", headers=_attachment(filename))


@router.get("/diagrams/{diagram_id}/share")
def share_diagram(diagram_id: str, base_url: str | None = None):
    diagrams, _ = _get_stores()
    payload = SharePayload.from_diagram(_find_diagram(diagrams, diagram_id))
    return {"url": share_url_for(payload, base_url)}


# ── Built-ins and templates ──


class FromTemplateRequest(BaseModel):
    name: str | None = None


@router.get("/builtin")
def list_builtin():
    return [d.to_dict() for d in builtin_diagrams()]


@router.get("/templates")
def list_templates():
    return [
        {
            "id": t.id,
            "name": t.name,
            "description": t.description,
            "category": t.category,
            "icon": t.icon,
            "code": t.code,
        }
        for t in TEMPLATES
    ]


@router.post("/templates/{template_id}")
def create_from_template(template_id: str, req: FromTemplateRequest | None = None):
    diagrams, _ = _get_stores()
    try:
        return diagrams.create_from_template(template_id, req.name if req else None).to_dict()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Template not found")


# ── Backup, import, sharing ──


class ImportResponse(BaseModel):
    success: bool
    imported: int
    errors: list[str]
    diagrams: list[dict]
    current_id: str | None = None


class OpenSharedRequest(BaseModel):
    url: str


@router.get("/export")
def export_backup():
    """Download every stored diagram as a JSON backup."""
    diagrams, _ = _get_stores()
    records = diagrams.list_all()
    logger.info("Exporting backup of %d diagram(s)", len(records))
    return Response(
        content=encode_backup(records),
        media_type="application/json",
        headers=_attachment(backup_filename()),
    )


@router.post("/import", response_model=ImportResponse)
async def import_files(files: list[UploadFile] = File(...)):
    """Import .json backups and .mmd files. Bad files are reported, not fatal."""
    diagrams, _ = _get_stores()
    coordinator = ImportCoordinator(diagrams)
    decoded = await coordinator.process_files(files)
    result = await asyncio.to_thread(coordinator.persist, decoded)
    logger.info("Imported %d diagram(s), %d error(s)", result.imported, len(result.errors))
    return ImportResponse(
        success=result.success,
        imported=result.imported,
        errors=result.errors,
        diagrams=[d.to_dict() for d in result.diagrams],
        current_id=result.current_id,
    )


@router.post("/shared")
def open_shared(req: OpenSharedRequest):
    """Import the diagram in a share URL and return the URL to display instead."""
    diagrams, _ = _get_stores()
    diagram, cleaned = ImportCoordinator(diagrams).import_shared_url(req.url)
    return {"diagram": diagram.to_dict() if diagram else None, "url": cleaned}


# ── Collections ──


class CreateCollectionRequest(BaseModel):
    name: str
    description: str | None = None
    color: str | None = None
    icon: str | None = None


class UpdateCollectionRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None


@router.get("/collections")
def list_collections():
    _, collections = _get_stores()
    return [c.to_dict() for c in collections.list_all()]


@router.post("/collections")
def create_collection(req: CreateCollectionRequest):
    _, collections = _get_stores()
    try:
        return collections.create(req.name, req.description, req.color, req.icon).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/collections/{collection_id}")
def get_collection(collection_id: str):
    _, collections = _get_stores()
    collection = collections.get(collection_id)
    if collection is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection.to_dict()


@router.patch("/collections/{collection_id}")
def update_collection(collection_id: str, req: UpdateCollectionRequest):
    _, collections = _get_stores()
    try:
        return collections.update(collection_id, **req.model_dump(exclude_none=True)).to_dict()
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Collection not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/collections/{collection_id}")
def delete_collection(collection_id: str):
    """Delete a collection. Its diagrams are kept."""
    _, collections = _get_stores()
    if collections.get(collection_id) is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    collections.delete(collection_id)
    return {"deleted": True, "collection_id": collection_id}


@router.get("/collections/{collection_id}/diagrams")
def list_collection_diagrams(collection_id: str):
    _, collections = _get_stores()
    if collections.get(collection_id) is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return [d.to_dict() for d in collections.diagrams_in(collection_id)]


@router.put("/collections/{collection_id}/diagrams/{diagram_id}")
def add_to_collection(collection_id: str, diagram_id: str):
    _, collections = _get_stores()
    try:
        collections.add_diagram_to_collection(collection_id, diagram_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"collection_id": collection_id, "diagram_id": diagram_id, "member": True}


@router.delete("/collections/{collection_id}/diagrams/{diagram_id}")
def remove_from_collection(collection_id: str, diagram_id: str):
    _, collections = _get_stores()
    try:
        collections.remove_diagram_from_collection(collection_id, diagram_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"collection_id": collection_id, "diagram_id": diagram_id, "member": False}
