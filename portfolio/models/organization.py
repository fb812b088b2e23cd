from typing import Any

from portfolio.models.base import DocumentModel, json_list_field


class Organization(DocumentModel, table=True):
    """
    SQLModel representing an organization.

    Attributes:
        description: Free-form description.
        jobs: Positions held at the organization (see ``schemas.organization.Job``).
        location: Where the organization is based.
        name: Organization name.
        products: Product names or ids associated with the organization.
        size: Head count.
        website: Public website URL.
    """

    __tablename__ = "organizations"

    description: str = ""
    jobs: list[dict[str, Any]] = json_list_field()
    location: str = ""
    name: str
    products: list[str] = json_list_field()
    size: int = 0
    website: str = ""
