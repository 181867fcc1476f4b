# tests/test_rule_store.py
import pytest
from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import sessionmaker

from dqscore.catalog import StaticFieldCatalog
from dqscore.database import Base
from dqscore.errors import DuplicateError, RuleSetNotFoundError, ValidationError
from dqscore.models import FieldRule, RuleSet
from dqscore.schemas import FieldRuleIn
from dqscore.services.rule_store import RuleStore

def fields(rs):
    return [(r.field_name, r.weight, r.required) for r in rs.rules]

def test_absent_type_yields_empty_rule_set(store):
    rs = store.get_rule_set("Lead")
    assert rs.record_type == "Lead"
    assert rs.rules == []

def test_create_and_read_in_order(store, account_rules):
    store.create_rule_set("Account", account_rules)
    rs = store.get_rule_set("Account")
    assert fields(rs) == [("Name", 5, True), ("Industry", 1, False)]
    assert store.list_record_types() == ["Account"]

def test_create_duplicate_rejected(store, account_rules):
    store.create_rule_set("Account", account_rules)
    with pytest.raises(DuplicateError):
        store.create_rule_set("Account", [{"field_name": "Phone", "weight": 2}])
    assert fields(store.get_rule_set("Account")) == [("Name", 5, True), ("Industry", 1, False)]

def test_create_requires_record_type(store):
    with pytest.raises(ValidationError):
        store.create_rule_set("  ")

def test_replace_swaps_whole_list(store, account_rules):
    store.create_rule_set("Account", account_rules)
    store.replace_rules("Account", [
        {"field_name": "Phone", "weight": 3, "required": True},
        {"field_name": "Name", "weight": 2},
    ])
    assert fields(store.get_rule_set("Account")) == [("Phone", 3, True), ("Name", 2, False)]

def test_replace_with_empty_list_clears_rules(store, account_rules):
    store.create_rule_set("Account", account_rules)
    store.replace_rules("Account", [])
    assert store.get_rule_set("Account").rules == []

@pytest.mark.parametrize("bad_weight", [0, 6, -1])
def test_replace_invalid_weight_leaves_rules_unchanged(store, account_rules, bad_weight):
    store.create_rule_set("Account", account_rules)
    before = store.get_rule_set("Account").rules
    with pytest.raises(ValidationError) as exc:
        store.replace_rules("Account", [
            {"field_name": "Phone", "weight": 3},
            {"field_name": "Website", "weight": bad_weight},
        ])
    assert any("Website" in p for p in exc.value.problems)
    assert store.get_rule_set("Account").rules == before

@pytest.mark.parametrize("bad_name", ["", "   ", None])
def test_replace_empty_field_name_rejected(store, account_rules, bad_name):
    store.create_rule_set("Account", account_rules)
    with pytest.raises(ValidationError):
        store.replace_rules("Account", [{"field_name": bad_name, "weight": 1}])
    assert len(store.get_rule_set("Account").rules) == 2

def test_replace_duplicate_field_rejected(store, account_rules):
    store.create_rule_set("Account", account_rules)
    with pytest.raises(ValidationError) as exc:
        store.replace_rules("Account", [
            {"field_name": "Phone", "weight": 1},
            {"field_name": "phone ", "weight": 2},
        ])
    assert any("duplicate" in p for p in exc.value.problems)
    assert fields(store.get_rule_set("Account")) == [("Name", 5, True), ("Industry", 1, False)]

def test_replace_reports_every_problem(store, account_rules):
    store.create_rule_set("Account", account_rules)
    with pytest.raises(ValidationError) as exc:
        store.replace_rules("Account", [
            {"field_name": "", "weight": 1},
            {"field_name": "A", "weight": 9},
            {"field_name": "B", "weight": "3 - Medium"},
        ])
    assert len(exc.value.problems) == 3

def test_replace_is_atomic_on_failure(store, account_rules, monkeypatch):
    store.create_rule_set("Account", account_rules)

    def boom(rs, rules):
        raise RuntimeError("insert failed")

    # delete has already run when the inserts blow up
    monkeypatch.setattr(RuleStore, "_new_rows", staticmethod(boom))
    with pytest.raises(RuntimeError):
        store.replace_rules("Account", [{"field_name": "Phone", "weight": 3}])
    monkeypatch.undo()

    assert fields(store.get_rule_set("Account")) == [("Name", 5, True), ("Industry", 1, False)]

def test_replace_unknown_type_rejected(store):
    with pytest.raises(RuleSetNotFoundError):
        store.replace_rules("Case", [{"field_name": "Subject", "weight": 2}])
    assert store.list_record_types() == []

def test_replace_is_idempotent(store, account_rules):
    store.create_rule_set("Account", [])
    new = [FieldRuleIn(field_name="Phone", weight=4, required=True, label="Main Phone"),
           FieldRuleIn(field_name="Website", weight=2)]
    first = store.replace_rules("Account", new).rules
    second = store.replace_rules("Account", new).rules
    assert first == second
    assert store.get_rule_set("Account").rules == first

def test_replace_does_not_touch_other_types(store, account_rules):
    store.create_rule_set("Account", account_rules)
    store.create_rule_set("Contact", [{"field_name": "Email", "weight": 5, "required": True}])
    store.replace_rules("Account", [{"field_name": "Phone", "weight": 1}])
    assert fields(store.get_rule_set("Contact")) == [("Email", 5, True)]

def test_display_labels(db):
    catalog = StaticFieldCatalog({"Account": {"Name": "Account Name", "Rating": "Rating", "OwnerId": "Owner ID"}})
    store = RuleStore(db, catalog=catalog)
    store.create_rule_set("Account", [
        {"field_name": "Name", "weight": 5},
        {"field_name": "OwnerId", "weight": 2, "label": "Account Owner"},
        {"field_name": "Rating", "weight": 1},
    ])
    labels = [r.display_label for r in store.get_rule_set("Account").rules]
    assert labels == ["Account Name", "Account Owner", "Rating"]

def test_derived_label_without_catalog(store):
    store.create_rule_set("Opportunity", [{"field_name": "TrackingNumber__c", "weight": 1}])
    assert store.get_rule_set("Opportunity").rules[0].display_label == "Tracking Number"

def test_catalog_rejects_unknown_fields(db):
    store = RuleStore(db, catalog=StaticFieldCatalog({"Account": {"Name": "Account Name"}}))
    store.create_rule_set("Account", [{"field_name": "Name", "weight": 5}])
    with pytest.raises(ValidationError) as exc:
        store.replace_rules("Account", [{"field_name": "Nmae", "weight": 5}])
    assert "unknown field" in exc.value.problems[0]
    # types the catalog does not know are not checked
    store.create_rule_set("Widget__c", [{"field_name": "Colour__c", "weight": 2}])

def test_field_names_are_trimmed(store):
    store.create_rule_set("Lead", [{"field_name": "  Company ", "weight": 3}])
    assert store.get_rule_set("Lead").rules[0].field_name == "Company"

def test_available_fields_sorted_by_label(db):
    catalog = StaticFieldCatalog({"Account": {"Phone": "phone", "Name": "Account Name", "OwnerId": "", "Zip": "Billing Zip"}})
    store = RuleStore(db, catalog=catalog)
    opts = [(o.field_name, o.label) for o in store.available_fields("Account")]
    assert opts == [
        ("Name", "Account Name"),
        ("Zip", "Billing Zip"),
        ("OwnerId", "Owner Name"),
        ("Phone", "phone"),
    ]
    assert store.available_fields("Lead") == []

def test_created_and_updated_timestamps(store, account_rules):
    store.create_rule_set("Account", account_rules)
    rs = store.get_rule_set("Account")
    assert rs.created_at is not None
    assert rs.updated_at is not None

def test_record_types_are_case_insensitive(store, account_rules):
    store.create_rule_set("Account", account_rules)
    with pytest.raises(DuplicateError):
        store.create_rule_set("account")
    store.replace_rules("ACCOUNT", [{"field_name": "Phone", "weight": 2}])
    rs = store.get_rule_set("account")
    assert rs.record_type == "Account"
    assert fields(rs) == [("Phone", 2, False)]
    assert store.list_record_types() == ["Account"]

def test_reader_never_sees_half_replaced_rules(tmp_path, account_rules):
    engine = create_engine(f"sqlite:///{tmp_path / 'rules.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    writer, reader = Session(), Session()
    try:
        RuleStore(writer).create_rule_set("Account", account_rules)

        # writer is mid-replace: old rules deleted, new ones inserted, not committed
        rs = writer.execute(select(RuleSet).where(RuleSet.record_type == "Account")).scalar_one()
        writer.execute(delete(FieldRule).where(FieldRule.rule_set_id == rs.id))
        writer.add_all(RuleStore._new_rows(rs, [FieldRuleIn(field_name="Phone", weight=3)]))
        writer.flush()

        assert fields(RuleStore(reader).get_rule_set("Account")) == [("Name", 5, True), ("Industry", 1, False)]
        reader.rollback()

        writer.commit()
        assert fields(RuleStore(reader).get_rule_set("Account")) == [("Phone", 3, False)]
    finally:
        writer.close()
        reader.close()
        engine.dispose()
