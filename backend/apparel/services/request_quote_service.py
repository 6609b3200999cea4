"""
Request Quote Service

Quote requests move through pending -> reviewing -> quoted -> approved ->
completed (or rejected). Every staff answer is stored as a new admin
response version; the transition table in apparel.domain.request_quote
decides what may follow what.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from apparel.connectors.identity_connector import IdentityConnector
from apparel.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from apparel.core.pagination import page_offset
from apparel.domain.request_quote import (
    AdminResponse,
    AdminResponseCreate,
    CustomerFeedback,
    QuoteCustomerFeedback,
    RequestQuote,
    RequestQuoteCreate,
    can_transition,
    quote_status_for,
)
from apparel.repositories.request_quote_repository import RequestQuoteRepository

logger = logging.getLogger(__name__)


class RequestQuoteService:

    def __init__(self, quote_repository: RequestQuoteRepository = None, identity_connector: IdentityConnector = None):
        self.quotes = quote_repository or RequestQuoteRepository()
        self.identity = identity_connector or IdentityConnector()

    def create(self, payload: RequestQuoteCreate, user_id: Optional[str] = None) -> RequestQuote:
        quote = self.quotes.create(payload, user_id=user_id)
        logger.info(f"Quote request {quote.id} ({quote.type}) received from {quote.email}")
        return quote

    def list(
        self,
        status: Optional[str] = None,
        quote_type: Optional[str] = None,
        search: Optional[str] = None,
        designer_id: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[RequestQuote], int]:
        return self.quotes.find_all(
            status=status,
            quote_type=quote_type,
            search=search,
            designer_id=designer_id,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=page_offset(page, limit)
        )

    def get(self, quote_id: int) -> RequestQuote:
        quote = self.quotes.find_by_id(quote_id)
        if not quote:
            raise NotFoundError("Quote request not found")
        return quote

    def add_admin_response(self, quote_id: int, payload: AdminResponseCreate, responded_by: str) -> RequestQuote:
        """
        Record a new response version

        Raises:
            NotFoundError: unknown quote
            ValidationError: the response status is not reachable from the current status
            ConflictError: another response was recorded concurrently
        """
        quote = self.get(quote_id)
        previous_version = quote.current_version
        target = quote_status_for(payload.status)
        if not can_transition(quote.status, target):
            raise ValidationError(f"Cannot change quote status from {quote.status} to {target}")

        response = AdminResponse(
            version=quote.current_version + 1,
            responded_by=responded_by,
            responded_at=datetime.now(timezone.utc),
            **payload.model_dump()
        )
        quote.add_admin_response(response)
        saved = self.quotes.save_state(quote, expected_version=previous_version)
        if saved is None:
            raise ConflictError("This quote was answered by someone else; reload it and try again")
        logger.info(f"Quote {quote_id} response v{response.version} ({payload.status}) by {responded_by}")
        return saved

    def update_status(self, quote_id: int, status: str, admin_notes: Optional[str] = None) -> RequestQuote:
        """Transition-checked status change; keeping the status only updates the notes"""
        quote = self.get(quote_id)
        if status != quote.status and not can_transition(quote.status, status):
            raise ValidationError(f"Cannot change quote status from {quote.status} to {status}")

        if status != quote.status:
            quote.set_status(status)
        if admin_notes is not None:
            quote.admin_notes = admin_notes
        return self.quotes.save_state(quote)

    async def assign_designer(self, quote_id: int, designer_id: str) -> RequestQuote:
        quote = self.get(quote_id)
        designer = await self.identity.get_user(designer_id)
        if designer.role != "designer":
            raise ValidationError("User is not a designer")
        quote.designer_id = designer.id
        logger.info(f"Quote {quote_id} assigned to designer {designer.id}")
        return self.quotes.save_state(quote)

    def unassign_designer(self, quote_id: int) -> RequestQuote:
        quote = self.get(quote_id)
        quote.designer_id = None
        return self.quotes.save_state(quote)

    def customer_feedback(self, quote_id: int, payload: QuoteCustomerFeedback) -> RequestQuote:
        """
        Customer reaction to the current response, authenticated by the quote's email

        Raises:
            ForbiddenError: email does not match the quote
            ValidationError: no response has been sent yet
        """
        quote = self.get(quote_id)
        if str(payload.email).lower() != quote.email.lower():
            raise ForbiddenError("Email does not match this quote request")

        current = quote.current_response()
        if not current:
            raise ValidationError("This quote has no response yet")

        current.customer_viewed = True
        current.customer_viewed_at = datetime.now(timezone.utc)
        current.customer_feedback = CustomerFeedback(
            rating=payload.rating,
            comments=payload.comments,
            requested_changes=payload.requested_changes
        )
        return self.quotes.save_state(quote)
