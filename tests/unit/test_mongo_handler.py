"""Tests for the MongoDB handler."""

from pymongo import UpdateOne

from core.reconciliation import reconcile

from integrations.mongo_handler import (
    delete_user,
    insert_notifications,
    load_snapshot,
    save_system_config,
    store_reconciliation_updates,
)


def test_load_snapshot(fake_mongo, fake_collection, make_user, make_loan):
    fake_mongo.collections.update({
        "users": fake_collection([{**make_user(), "_id": "x1"}]),
        "loans": fake_collection([{**make_loan(), "_id": "x2"}]),
        "system_config": fake_collection([{"id": "config", "budget": 12_000_000, "rankProfit": 250_000}]),
    })

    snapshot = load_snapshot("mongodb://test:27017", "ndv_money")

    assert snapshot["users"] == [make_user()]
    assert snapshot["loans"] == [make_loan()]
    assert snapshot["budget"] == 12_000_000
    assert snapshot["rankProfit"] == 250_000
    assert fake_mongo.uri == "mongodb://test:27017"
    assert fake_mongo.closed


def test_load_snapshot_defaults_without_config(fake_mongo):
    snapshot = load_snapshot("mongodb://test:27017", "ndv_money")

    assert snapshot["users"] == []
    assert snapshot["loans"] == []
    assert snapshot["budget"] == 30_000_000
    assert snapshot["rankProfit"] == 0


def test_store_writes_only_changed_documents(fake_mongo, make_user, make_loan):
    changed_user = make_user(rank="silver", rankProgress=8)
    changed_loan = make_loan(fine=10_000)
    result = {
        "users": [changed_user, make_user(id="1002")],
        "loans": [changed_loan, make_loan(id="NDV-1002-01")],
        "updated_users": [changed_user],
        "updated_loans": [changed_loan],
        "changes": {
            "users": {"1001": {"rank": "silver", "rankProgress": 8}},
            "loans": {"NDV-1001-01": {"fine": 10_000}},
        },
    }

    summary = store_reconciliation_updates("mongodb://test:27017", "ndv_money", result)

    assert fake_mongo.collections["users"].bulk_ops == [
        UpdateOne({"id": "1001"}, {"$set": {"rank": "silver", "rankProgress": 8}})
    ]
    assert fake_mongo.collections["loans"].bulk_ops == [
        UpdateOne({"id": "NDV-1001-01"}, {"$set": {"fine": 10_000}})
    ]
    assert summary["users_written"] == 1
    assert summary["loans_written"] == 1
    assert fake_mongo.closed


def test_store_sets_only_reconciled_fields(fake_mongo, today, make_user, make_loan):
    """Only the reconciled fields are $set, so concurrent writes to other fields survive."""
    user = make_user(rank="gold", rankProgress=2, totalLimit=5_000_000, balance=4_800_000)
    loan = make_loan(amount=2_000_000, date="05/03/2025")
    result = reconcile(today, [loan], [user])

    store_reconciliation_updates("mongodb://test:27017", "ndv_money", result)

    assert fake_mongo.collections["loans"].bulk_ops == [
        UpdateOne({"id": "NDV-1001-01"}, {"$set": {"fine": 10_000}})
    ]
    assert fake_mongo.collections["users"].bulk_ops == [
        UpdateOne({"id": "1001"}, {"$set": {
            "overdueDaysCharged": 5,
            "rank": "silver",
            "rankProgress": 8,
            "totalLimit": 4_000_000,
            "balance": 4_000_000,
        }})
    ]


def test_store_records_run(fake_mongo, make_user):
    result = {
        "users": [make_user()], "loans": [], "updated_users": [], "updated_loans": [],
        "changes": {"users": {}, "loans": {}},
    }

    summary = store_reconciliation_updates("mongodb://test:27017", "ndv_money", result)

    run = fake_mongo.collections["reconciliation_runs"].inserted[0]
    assert run["reconciliation_run_id"] == summary["run_id"]
    assert run["users_checked"] == 1
    assert run["users_updated"] == 0
    assert "created_at" in run


def test_store_nothing_changed_skips_bulk_write(fake_mongo):
    result = {
        "users": [], "loans": [], "updated_users": [], "updated_loans": [],
        "changes": {"users": {}, "loans": {}},
    }

    summary = store_reconciliation_updates("mongodb://test:27017", "ndv_money", result)

    assert fake_mongo.collections["users"].bulk_ops == []
    assert fake_mongo.collections["loans"].bulk_ops == []
    assert summary["users_written"] == 0
    assert summary["loans_written"] == 0


def test_save_system_config(fake_mongo):
    save_system_config("mongodb://test:27017", "ndv_money", budget=25_000_000)

    assert fake_mongo.collections["system_config"].updates == [
        ({"id": "config"}, {"$set": {"budget": 25_000_000}}, True)
    ]


def test_insert_notifications(fake_mongo):
    count = insert_notifications("mongodb://test:27017", "ndv_money", [{"id": "N1"}, {"id": "N2"}])

    assert count == 2
    assert len(fake_mongo.collections["notifications"].inserted) == 2


def test_insert_no_notifications_skips_connection(fake_mongo):
    assert insert_notifications("mongodb://test:27017", "ndv_money", []) == 0
    assert fake_mongo.uri is None


def test_delete_user_cascades(fake_mongo, fake_collection, make_user, make_loan):
    fake_mongo.collections.update({
        "users": fake_collection([make_user(id="1001"), make_user(id="1002")]),
        "loans": fake_collection([
            make_loan(id="A", userId="1001"),
            make_loan(id="B", userId="1001"),
            make_loan(id="C", userId="1002"),
        ]),
        "notifications": fake_collection([{"id": "N1", "userId": "1001"}]),
    })

    deleted = delete_user("mongodb://test:27017", "ndv_money", "1001")

    assert deleted == {"users": 1, "loans": 2, "notifications": 1}
    assert [l["id"] for l in fake_mongo.collections["loans"].docs] == ["C"]
