"""
Mock endpoint management API routes.

Provides CRUD operations for the stub routes served by the mock server,
plus a status endpoint describing the mock server configuration.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..models.mock_endpoint import MockEndpoint
from ..schemas.mock_endpoint import (
    MockEndpointCreate,
    MockEndpointUpdate,
    MockEndpointResponse,
    MockServerStatus,
)


router = APIRouter(prefix="/api/mock", tags=["mock"])


def _get_endpoint_or_404(db: Session, endpoint_id: int) -> MockEndpoint:
    db_endpoint = db.query(MockEndpoint).filter(MockEndpoint.id == endpoint_id).first()
    if db_endpoint is None:
        raise ResourceNotFoundError("Mock endpoint", endpoint_id)
    return db_endpoint


@router.get("/status", response_model=MockServerStatus)
def get_mock_status(db: Session = Depends(get_db)):
    """Report the mock server port and how many endpoints it will serve."""
    enabled = db.query(MockEndpoint).filter(MockEndpoint.enabled == True).count()  # noqa: E712
    return MockServerStatus(status="configured", endpoints=enabled, port=get_settings().mock_port)


@router.get("/endpoints", response_model=list[MockEndpointResponse])
def list_mock_endpoints(db: Session = Depends(get_db)):
    """List all mock endpoints, newest first."""
    return db.query(MockEndpoint).order_by(MockEndpoint.created_at.desc(), MockEndpoint.id.desc()).all()


@router.post("/endpoints", response_model=MockEndpointResponse, status_code=status.HTTP_201_CREATED)
def create_mock_endpoint(endpoint_data: MockEndpointCreate, db: Session = Depends(get_db)):
    """Create a mock endpoint. The method is stored upper-cased."""
    db_endpoint = MockEndpoint(**endpoint_data.model_dump())
    db.add(db_endpoint)
    db.commit()
    db.refresh(db_endpoint)
    return db_endpoint


@router.get("/endpoints/{endpoint_id}", response_model=MockEndpointResponse)
def get_mock_endpoint(endpoint_id: int, db: Session = Depends(get_db)):
    """Get a mock endpoint by ID."""
    return _get_endpoint_or_404(db, endpoint_id)


@router.put("/endpoints/{endpoint_id}", response_model=MockEndpointResponse)
def update_mock_endpoint(
    endpoint_id: int,
    endpoint_data: MockEndpointUpdate,
    db: Session = Depends(get_db)
):
    """Update a mock endpoint. Only provided fields change."""
    db_endpoint = _get_endpoint_or_404(db, endpoint_id)

    for field, value in endpoint_data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_endpoint, field, value)

    db.commit()
    db.refresh(db_endpoint)
    return db_endpoint


@router.delete("/endpoints/{endpoint_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_mock_endpoint(endpoint_id: int, db: Session = Depends(get_db)):
    """Delete a mock endpoint by ID."""
    db_endpoint = _get_endpoint_or_404(db, endpoint_id)
    db.delete(db_endpoint)
    db.commit()
    return None
