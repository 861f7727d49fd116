from sqlalchemy.orm import Session
from models.Reference import Reference
from repository.reference import get_reference_by_code


def initial_reference(db: Session, is_commit: bool = True):
    references = [
        Reference(code="123456", ticket_count=5, used=False),
    ]

    for reference in references:
        existing = get_reference_by_code(db=db, code=reference.code)
        if not existing:
            db.add(reference)

    if is_commit:
        db.commit()
