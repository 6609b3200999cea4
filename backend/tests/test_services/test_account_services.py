"""
Unit tests for the design, template, order and feedback services
"""
from unittest.mock import MagicMock

import pytest

from apparel.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from apparel.domain.design import DesignSave, DesignUpdate, DesignVersionCreate
from apparel.domain.feedback import FeedbackCreate
from apparel.services.design_service import DesignService
from apparel.services.feedback_service import FeedbackService
from apparel.services.order_service import OrderService
from apparel.services.template_service import TemplateService


def canvas(image_id=100):
    return {"front": {"images_id": image_id, "element_Json": '{"objects": [1]}'}}


# ============================================================================
# Designs
# ============================================================================

@pytest.fixture
def designs(sample_design):
    repository = MagicMock()
    repository.find_by_id.return_value = sample_design
    repository.update.return_value = sample_design
    repository.create.return_value = sample_design
    return repository


@pytest.fixture
def design_service(designs, sample_color):
    products = MagicMock()
    products.find_color.return_value = sample_color
    return DesignService(design_repository=designs, product_repository=products)


class TestDesignService:

    def test_first_save_creates(self, design_service, designs, customer):
        designs.find_original.return_value = None

        design, created = design_service.save(customer.id, DesignSave(shirt_color_id=10, element_design=canvas()))

        assert created is True
        kwargs = designs.create.call_args.kwargs
        assert kwargs["user_id"] == customer.id
        assert kwargs["name"] == "Shirt Design"
        designs.update.assert_not_called()

    def test_second_save_updates(self, design_service, designs, customer, sample_design):
        designs.find_original.return_value = sample_design

        design, created = design_service.save(
            customer.id, DesignSave(shirt_color_id=10, element_design=canvas(), name="Team Logo v2")
        )

        assert created is False
        design_id, fields = designs.update.call_args.args
        assert design_id == 50
        assert fields["name"] == "Team Logo v2"
        assert "design_images" not in fields
        designs.create.assert_not_called()

    def test_save_rejects_image_of_other_color(self, design_service, customer):
        with pytest.raises(ValidationError):
            design_service.save(customer.id, DesignSave(shirt_color_id=10, element_design=canvas(999)))

    def test_save_on_missing_color(self, design_service, customer):
        design_service.products.find_color.return_value = None

        with pytest.raises(NotFoundError):
            design_service.save(customer.id, DesignSave(shirt_color_id=77, element_design=canvas()))

    def test_owner_and_staff_can_read(self, design_service, customer, designer, admin, sample_design):
        assert design_service.get(customer, 50) is sample_design
        assert design_service.get(designer, 50) is sample_design
        assert design_service.get(admin, 50) is sample_design

    def test_other_customer_cannot_read(self, design_service, customer):
        stranger = customer.model_copy(update={"id": "user_other"})

        with pytest.raises(ForbiddenError):
            design_service.get(stranger, 50)

    def test_only_owner_updates(self, design_service, designer):
        with pytest.raises(ForbiddenError):
            design_service.update(designer, 50, DesignUpdate(name="Edited"))

    def test_delete_missing(self, design_service, designs, customer):
        designs.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            design_service.delete(customer, 404)

    def test_version_numbering(self, design_service, designs, designer, customer):
        designs.count_versions.return_value = 2

        design_service.create_version(designer, 50, DesignVersionCreate())

        kwargs = designs.create.call_args.kwargs
        assert kwargs["version"] == "v3"
        assert kwargs["parent_design_id"] == 50
        assert kwargs["user_id"] == customer.id
        assert kwargs["name"] == "Team Logo"
        assert kwargs["element_design"]["front"].images_id == 100

    def test_version_overrides_canvas(self, design_service, designs, designer):
        designs.count_versions.return_value = 0

        design_service.create_version(designer, 50, DesignVersionCreate(element_design=canvas()))

        kwargs = designs.create.call_args.kwargs
        assert kwargs["version"] == "v1"
        assert kwargs["element_design"]["front"].element_Json == '{"objects": [1]}'


# ============================================================================
# Design templates
# ============================================================================

@pytest.fixture
def templates():
    repository = MagicMock()
    repository.find_all.return_value = ([], 0)
    return repository


class TestTemplateService:

    def test_public_listing_is_active_only(self, templates):
        service = TemplateService(template_repository=templates)

        service.list(include_inactive=False, is_active=False, category="all", page=2, limit=12)

        kwargs = templates.find_all.call_args.kwargs
        assert kwargs["is_active"] is True
        assert kwargs["category"] is None
        assert kwargs["offset"] == 12

    def test_admin_filters_pass_through(self, templates):
        service = TemplateService(template_repository=templates)

        service.list(include_inactive=True, is_active=False, category="logo", featured=True, sort="rating")

        kwargs = templates.find_all.call_args.kwargs
        assert kwargs["is_active"] is False
        assert kwargs["category"] == "logo"
        assert kwargs["featured"] is True
        assert kwargs["sort"] == "rating"

    def test_inactive_template_hidden_from_public(self, templates):
        templates.find_by_id.return_value = MagicMock(is_active=False)
        service = TemplateService(template_repository=templates)

        with pytest.raises(NotFoundError):
            service.get(1)
        assert service.get(1, include_inactive=True) is templates.find_by_id.return_value

    def test_toggle_missing(self, templates):
        templates.toggle_active.return_value = None

        with pytest.raises(NotFoundError):
            TemplateService(template_repository=templates).toggle_status(9)


# ============================================================================
# Orders
# ============================================================================

@pytest.fixture
def orders(sample_order):
    repository = MagicMock()
    repository.find_by_id.return_value = sample_order
    repository.find_all.return_value = ([sample_order], 21)
    return repository


class TestOrderService:

    def test_customer_listing_is_scoped(self, orders, customer):
        result, total = OrderService(order_repository=orders).list_for_user(customer.id, status="shipped", page=3, limit=10)

        assert total == 21
        orders.find_all.assert_called_once_with(user_id=customer.id, status="shipped", limit=10, offset=20)

    def test_other_users_order_is_missing(self, orders):
        with pytest.raises(NotFoundError):
            OrderService(order_repository=orders).get_for_user("user_other", 900)

    def test_own_order(self, orders, customer, sample_order):
        assert OrderService(order_repository=orders).get_for_user(customer.id, 900) is sample_order

    def test_status_update_with_notes(self, orders, sample_order):
        orders.update.return_value = sample_order

        OrderService(order_repository=orders).update_status(900, "shipping", "Packed")

        orders.update.assert_called_once_with(900, {"status": "shipping", "notes": "Packed"})

    def test_status_update_missing_order(self, orders):
        orders.update.return_value = None

        with pytest.raises(NotFoundError):
            OrderService(order_repository=orders).update_status(404, "canceled")


# ============================================================================
# Feedback
# ============================================================================

class TestFeedbackService:

    def test_create(self, orders, customer):
        feedback = MagicMock()
        service = FeedbackService(feedback_repository=feedback, order_repository=orders)

        service.create(customer.id, FeedbackCreate(order_id=900, rating=5, comment="Great print"))

        feedback.create.assert_called_once_with(900, customer.id, 5, "Great print")

    def test_missing_order(self, orders, customer):
        orders.find_by_id.return_value = None
        service = FeedbackService(feedback_repository=MagicMock(), order_repository=orders)

        with pytest.raises(NotFoundError):
            service.create(customer.id, FeedbackCreate(order_id=404, rating=4, comment="Nice"))

    def test_other_users_order(self, orders):
        feedback = MagicMock()
        service = FeedbackService(feedback_repository=feedback, order_repository=orders)

        with pytest.raises(ForbiddenError):
            service.create("user_other", FeedbackCreate(order_id=900, rating=1, comment="Not mine"))
        feedback.create.assert_not_called()
