"""
Environment management API routes.

Provides CRUD operations for environments and their variables. The
active environment supplies base URL, headers and variables to test
runs that do not name an environment.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import APIException, ConflictError, ResourceNotFoundError
from ..models.environment import Environment, Variable
from ..schemas.environment import (
    EnvironmentCreate,
    EnvironmentUpdate,
    EnvironmentWithVariables,
    VariableCreate,
    VariableUpdate,
    VariableResponse,
)


router = APIRouter(prefix="/api/environments", tags=["environments"])


def _get_environment_or_404(db: Session, environment_id: int) -> Environment:
    db_environment = db.query(Environment).filter(Environment.id == environment_id).first()
    if db_environment is None:
        raise ResourceNotFoundError("Environment", environment_id)
    return db_environment


def _get_variable_or_404(db: Session, variable_id: int) -> Variable:
    db_variable = db.query(Variable).filter(Variable.id == variable_id).first()
    if db_variable is None:
        raise ResourceNotFoundError("Variable", variable_id)
    return db_variable


def _deactivate_others(db: Session, environment_id: int | None = None) -> None:
    query = db.query(Environment).filter(Environment.is_active == True)  # noqa: E712
    if environment_id is not None:
        query = query.filter(Environment.id != environment_id)
    query.update({"is_active": False})


def _ensure_key_free(db: Session, environment_id: int, key: str, variable_id: int | None = None) -> None:
    query = db.query(Variable).filter(
        Variable.environment_id == environment_id,
        Variable.key == key,
    )
    if variable_id is not None:
        query = query.filter(Variable.id != variable_id)
    if query.first() is not None:
        raise ConflictError(f"Variable '{key}' already exists in environment {environment_id}")


# Environment endpoints

@router.post("", response_model=EnvironmentWithVariables, status_code=status.HTTP_201_CREATED)
def create_environment(environment_data: EnvironmentCreate, db: Session = Depends(get_db)):
    """
    Create a new environment with optional initial variables.

    If is_active is True, all other environments are deactivated.
    Duplicate variable keys are rejected with 409.
    """
    keys = [var.key for var in environment_data.variables]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise ConflictError(f"Duplicate variable keys: {', '.join(duplicates)}")

    if environment_data.is_active:
        _deactivate_others(db)

    db_environment = Environment(
        name=environment_data.name,
        base_url=environment_data.base_url,
        headers=environment_data.headers,
        is_active=environment_data.is_active,
    )
    db_environment.variables = [
        Variable(key=var.key, value=var.value) for var in environment_data.variables
    ]
    db.add(db_environment)
    db.commit()
    db.refresh(db_environment)
    return db_environment


@router.get("", response_model=list[EnvironmentWithVariables])
def list_environments(db: Session = Depends(get_db)):
    """List all environments with their variables, newest first."""
    return db.query(Environment).order_by(Environment.created_at.desc(), Environment.id.desc()).all()


@router.get("/active", response_model=EnvironmentWithVariables)
def get_active_environment(db: Session = Depends(get_db)):
    """Get the active environment."""
    db_environment = db.query(Environment).filter(Environment.is_active == True).first()  # noqa: E712
    if db_environment is None:
        raise APIException(
            detail="No active environment",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND"
        )
    return db_environment


@router.get("/{environment_id}", response_model=EnvironmentWithVariables)
def get_environment(environment_id: int, db: Session = Depends(get_db)):
    """Get an environment by ID with all its variables."""
    return _get_environment_or_404(db, environment_id)


@router.put("/{environment_id}", response_model=EnvironmentWithVariables)
def update_environment(
    environment_id: int,
    environment_data: EnvironmentUpdate,
    db: Session = Depends(get_db)
):
    """
    Update an existing environment.

    Setting is_active to True deactivates every other environment.
    """
    db_environment = _get_environment_or_404(db, environment_id)

    update_data = environment_data.model_dump(exclude_unset=True, exclude_none=True)

    if update_data.get("is_active") is True:
        _deactivate_others(db, environment_id)

    for field, value in update_data.items():
        setattr(db_environment, field, value)

    db.commit()
    db.refresh(db_environment)
    return db_environment


@router.delete("/{environment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_environment(environment_id: int, db: Session = Depends(get_db)):
    """Delete an environment and all its variables."""
    db_environment = _get_environment_or_404(db, environment_id)
    db.delete(db_environment)
    db.commit()
    return None


@router.post("/{environment_id}/activate", response_model=EnvironmentWithVariables)
def activate_environment(environment_id: int, db: Session = Depends(get_db)):
    """
    Set an environment as the active environment.

    Only one environment can be active at a time.
    """
    db_environment = _get_environment_or_404(db, environment_id)

    _deactivate_others(db, environment_id)
    db_environment.is_active = True
    db.commit()
    db.refresh(db_environment)
    return db_environment


# Variable endpoints

@router.post("/{environment_id}/variables", response_model=VariableResponse, status_code=status.HTTP_201_CREATED)
def add_variable(
    environment_id: int,
    variable_data: VariableCreate,
    db: Session = Depends(get_db)
):
    """Add a new variable to an environment."""
    _get_environment_or_404(db, environment_id)
    _ensure_key_free(db, environment_id, variable_data.key)

    db_variable = Variable(
        environment_id=environment_id,
        key=variable_data.key,
        value=variable_data.value,
    )
    db.add(db_variable)
    db.commit()
    db.refresh(db_variable)
    return db_variable


@router.put("/variables/{variable_id}", response_model=VariableResponse)
def update_variable(
    variable_id: int,
    variable_data: VariableUpdate,
    db: Session = Depends(get_db)
):
    """Update an existing variable. Only provided fields change."""
    db_variable = _get_variable_or_404(db, variable_id)

    update_data = variable_data.model_dump(exclude_unset=True, exclude_none=True)
    if update_data.get("key"):
        _ensure_key_free(db, db_variable.environment_id, update_data["key"], variable_id)

    for field, value in update_data.items():
        setattr(db_variable, field, value)

    db.commit()
    db.refresh(db_variable)
    return db_variable


@router.delete("/variables/{variable_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_variable(variable_id: int, db: Session = Depends(get_db)):
    """Delete a variable by ID."""
    db_variable = _get_variable_or_404(db, variable_id)
    db.delete(db_variable)
    db.commit()
    return None
