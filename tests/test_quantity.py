import pytest
from sqlalchemy import func, select

from reorder import crud, models
from reorder.errors import InvalidAdjustmentError
from reorder.quantity import DELETED, UPDATED, adjust_quantity


@pytest.fixture
def stocked(db_session, user):
    """A list holding one product (sku A1) at quantity 3."""
    reorder_list = crud.create_list(db_session, user.id, "Salon")
    reorder_list = crud.add_or_bump_product(db_session, reorder_list, "A1", "Shampoo", 3)
    return reorder_list, reorder_list.products[0]


def membership_count(db_session, product_id):
    stmt = select(func.count()).select_from(models.list_products).where(
        models.list_products.c.product_id == product_id
    )
    return db_session.scalar(stmt)


def test_increase_adds_exactly_one_each_time(db_session, stocked):
    _, product = stocked
    for expected in range(4, 14):
        assert adjust_quantity(db_session, product, "increase") == UPDATED
        assert product.reorder_quantity == expected


def test_increase_ignores_quantity_argument(db_session, stocked):
    _, product = stocked
    adjust_quantity(db_session, product, "increase", 50)
    assert product.reorder_quantity == 4


def test_decrease_to_zero_deletes_and_pulls_membership(db_session, stocked):
    reorder_list, product = stocked
    product_id = product.id

    assert adjust_quantity(db_session, product, "decrease") == UPDATED
    assert product.reorder_quantity == 2
    assert adjust_quantity(db_session, product, "decrease") == UPDATED
    assert adjust_quantity(db_session, product, "decrease") == DELETED

    assert db_session.get(models.ReorderProduct, product_id) is None
    assert membership_count(db_session, product_id) == 0
    db_session.refresh(reorder_list)
    assert reorder_list.products == []


def test_deleted_product_pulled_from_every_list(db_session, user, stocked):
    reorder_list, product = stocked
    # a second list that also references the same product row
    other = crud.create_list(db_session, user.id, "Backroom")
    other.products.append(product)
    db_session.commit()
    assert membership_count(db_session, product.id) == 2

    product_id = product.id
    assert adjust_quantity(db_session, product, "set", 0) == DELETED

    assert membership_count(db_session, product_id) == 0
    db_session.refresh(reorder_list)
    db_session.refresh(other)
    assert reorder_list.products == []
    assert other.products == []


def test_set_positive_quantity(db_session, stocked):
    _, product = stocked
    assert adjust_quantity(db_session, product, "set", 12) == UPDATED
    assert product.reorder_quantity == 12


def test_set_accepts_integral_float(db_session, stocked):
    _, product = stocked
    assert adjust_quantity(db_session, product, "set", 7.0) == UPDATED
    assert product.reorder_quantity == 7
    assert isinstance(product.reorder_quantity, int)


def test_set_zero_deletes(db_session, stocked):
    _, product = stocked
    product_id = product.id
    assert adjust_quantity(db_session, product, "set", 0) == DELETED
    assert db_session.get(models.ReorderProduct, product_id) is None


@pytest.mark.parametrize("bad", [-1, -2.0, 2.5, None, "4", True])
def test_set_rejects_invalid_quantity(db_session, stocked, bad):
    _, product = stocked
    with pytest.raises(InvalidAdjustmentError):
        adjust_quantity(db_session, product, "set", bad)
    db_session.refresh(product)
    assert product.reorder_quantity == 3


@pytest.mark.parametrize("kind", ["bump", "INCREASE", "", None])
def test_unknown_kind_rejected(db_session, stocked, kind):
    _, product = stocked
    with pytest.raises(InvalidAdjustmentError):
        adjust_quantity(db_session, product, kind)
    db_session.refresh(product)
    assert product.reorder_quantity == 3


def test_delete_product_cleans_membership(db_session, stocked):
    reorder_list, product = stocked
    product_id = product.id
    crud.delete_product(db_session, product)
    assert crud.get_product(db_session, product_id) is None
    assert membership_count(db_session, product_id) == 0
    db_session.refresh(reorder_list)
    assert reorder_list.products == []
