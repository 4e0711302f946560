"""
People Service API Endpoints

Person management with soft delete: deleted people disappear from listings
but stay in storage and remain reachable with include_deleted.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from softdelete.context import PersistenceContext
from softdelete.database import ContextLocal, init_db
from softdelete.person_service import PersonNoteService, PersonService

logger = logging.getLogger(__name__)

# ============================================================================
# Setup
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="People Service API",
    description="Person management with transparent soft delete",
    version="1.0.0",
    lifespan=lifespan,
)


# ============================================================================
# Dependency Injection
# ============================================================================


def get_context():
    """Get a unit of work for the request"""
    ctx = ContextLocal()
    try:
        yield ctx
    finally:
        ctx.close()


# ============================================================================
# Health Check
# ============================================================================


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "people-service"}


# ============================================================================
# People Endpoints
# ============================================================================


@app.post("/people", tags=["People"], status_code=201)
async def create_person(
    first_name: str,
    last_name: str = "",
    ctx: PersistenceContext = Depends(get_context),
):
    """
    Create a new person

    - **first_name**: Given name
    - **last_name**: Family name
    """
    try:
        person = PersonService.create_person(ctx, first_name=first_name, last_name=last_name)
        return person.to_dict()
    except SQLAlchemyError as e:
        logger.error(f"Error creating person: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/people", tags=["People"])
async def list_people(
    last_name: Optional[str] = None,
    include_deleted: bool = False,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: PersistenceContext = Depends(get_context),
):
    """List people; soft-deleted people are hidden unless include_deleted is set"""
    people, total = PersonService.list_people(
        ctx,
        last_name=last_name,
        include_deleted=include_deleted,
        limit=limit,
        offset=offset,
    )
    return {
        "people": [p.to_dict() for p in people],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@app.get("/people/deleted", tags=["People"])
async def list_deleted_people(ctx: PersistenceContext = Depends(get_context)):
    """List soft-deleted people"""
    people = PersonService.list_deleted_people(ctx)
    return {"people": [p.to_dict() for p in people], "total": len(people)}


@app.get("/people/{person_id}", tags=["People"])
async def get_person(
    person_id: int,
    include_deleted: bool = False,
    ctx: PersistenceContext = Depends(get_context),
):
    """Get a specific person"""
    person = PersonService.get_person(ctx, person_id, include_deleted=include_deleted)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person.to_dict()


@app.delete("/people/{person_id}", tags=["People"])
async def delete_person(person_id: int, ctx: PersistenceContext = Depends(get_context)):
    """Soft delete a person"""
    try:
        deleted = PersonService.delete_person(ctx, person_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting person {person_id}: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Person not found")
    return {"deleted": True, "person_id": person_id}


# ============================================================================
# Note Endpoints
# ============================================================================


@app.post("/people/{person_id}/notes", tags=["Notes"], status_code=201)
async def add_note(person_id: int, content: str, ctx: PersistenceContext = Depends(get_context)):
    """Attach a note to a person"""
    try:
        note = PersonNoteService.add_note(ctx, person_id, content)
    except SQLAlchemyError as e:
        logger.error(f"Error adding note: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    if not note:
        raise HTTPException(status_code=404, detail="Person not found")
    return note.to_dict()


@app.get("/people/{person_id}/notes", tags=["Notes"])
async def list_notes(person_id: int, ctx: PersistenceContext = Depends(get_context)):
    """Get notes for a person"""
    notes = PersonNoteService.list_notes(ctx, person_id)
    return {"notes": [n.to_dict() for n in notes], "total": len(notes)}


@app.delete("/notes/{note_id}", tags=["Notes"])
async def delete_note(note_id: int, ctx: PersistenceContext = Depends(get_context)):
    """Permanently delete a note"""
    try:
        deleted = PersonNoteService.delete_note(ctx, note_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting note {note_id}: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
    return {"deleted": True, "note_id": note_id}


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


if __name__ == "__main__":
    import uvicorn

    from softdelete.config import API_HOST, API_PORT, LOG_LEVEL

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=API_HOST, port=API_PORT)
