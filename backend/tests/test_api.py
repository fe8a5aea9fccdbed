import io
from datetime import timedelta
from pathlib import Path

import pytest

from config import settings
from models.log import Log
from services.admins import create_admin
from services.errors import ValidationFailure, StoreFailure
import utils.audit
from utils.tokenJWT import create_access_token


# ---- catalog ----

def test_root(client):
    assert client.get("/").json() == {"message": "Materials Withdrawal API is running"}


def test_product_listing_is_public(client, make_product):
    make_product("Banner", 30)
    make_product("Caneta", 3, category="brindes")

    resp = client.get("/products", params={"category": "brindes"})

    assert resp.status_code == 200
    body = resp.json()
    assert [p["name"] for p in body] == ["Caneta"]
    assert body[0]["category_label"] == "Brindes"
    assert body[0]["stock_level"] == "low"


def test_product_listing_unknown_category(client):
    resp = client.get("/products", params={"category": "moveis"})
    assert resp.status_code == 400


def test_categories(client):
    values = [c["value"] for c in client.get("/products/categories").json()]
    assert values == ["grafico", "estrutura_lojas", "brindes"]


def test_get_missing_product(client):
    assert client.get("/products/999").status_code == 404


def test_product_writes_need_admin(client):
    resp = client.post("/products", json={"name": "Banner", "category": "grafico"})
    assert resp.status_code in (401, 403)

    resp = client.post("/products", json={"name": "Banner", "category": "grafico"},
                       headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_product_crud(client, auth_headers, db):
    resp = client.post(
        "/products",
        json={"name": "Banner", "category": "grafico", "available_quantity": 25},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    product = resp.json()
    assert product["stock_level"] == "high"

    resp = client.patch(f"/products/{product['id']}", json={"available_quantity": 7}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["available_quantity"] == 7
    assert resp.json()["name"] == "Banner"

    resp = client.delete(f"/products/{product['id']}", headers=auth_headers)
    assert resp.status_code == 204
    assert client.get(f"/products/{product['id']}").status_code == 404

    actions = [row.action for row in db.query(Log).order_by(Log.id).all()]
    assert actions == ["LOGIN", "PRODUCT_CREATE", "PRODUCT_EDIT", "PRODUCT_DELETE"]


def test_patch_removes_dropped_images(client, auth_headers, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    (tmp_path / "products").mkdir()
    (tmp_path / "products" / "a.png").write_bytes(b"a")
    (tmp_path / "products" / "b.png").write_bytes(b"b")

    created = client.post(
        "/products",
        json={
            "name": "Display",
            "category": "estrutura_lojas",
            "image_urls": ["/uploads/products/a.png", "/uploads/products/b.png"],
            "cover_image_index": 1,
        },
        headers=auth_headers,
    ).json()

    resp = client.patch(
        f"/products/{created['id']}",
        json={"image_urls": ["/uploads/products/a.png"]},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["cover_image_index"] == 0
    assert resp.json()["cover_image_url"] == "/uploads/products/a.png"
    assert (tmp_path / "products" / "a.png").exists()
    assert not (tmp_path / "products" / "b.png").exists()


# ---- withdrawals ----

def test_withdrawal_flow(client, make_product, meta):
    banner = make_product("Banner", 10)

    resp = client.post("/withdrawals", json={"product_id": banner.id, "quantity": 3, **meta})

    assert resp.status_code == 201
    body = resp.json()
    assert body["previous_stock"] == 10
    assert body["new_stock"] == 7
    assert body["withdrawal"]["product_name"] == "Banner"
    assert body["withdrawal"]["kind"] == "WITHDRAWAL"
    assert client.get(f"/products/{banner.id}").json()["available_quantity"] == 7


def test_withdrawal_conflict_body(client, make_product, meta):
    banner = make_product("Banner", 3)

    resp = client.post("/withdrawals", json={"product_id": banner.id, "quantity": 5, **meta})

    assert resp.status_code == 409
    body = resp.json()
    assert body["product_id"] == banner.id
    assert body["available"] == 3
    assert body["requested"] == 5
    assert "Insufficient stock" in body["detail"]


def test_withdrawal_errors(client, make_product, meta):
    banner = make_product("Banner", 3)

    assert client.post("/withdrawals", json={"product_id": 999, "quantity": 1, **meta}).status_code == 404
    assert client.post("/withdrawals", json={"product_id": banner.id, "quantity": 0, **meta}).status_code == 422
    resp = client.post("/withdrawals", json={"product_id": banner.id, "quantity": 1,
                                             "destination": "  ", "supervisor": "Maria"})
    assert resp.status_code == 400


def test_batch_is_all_or_nothing(client, make_product, meta):
    a = make_product("Banner", 10)
    b = make_product("Display", 1, category="estrutura_lojas")

    resp = client.post("/withdrawals/batch", json={
        "items": [{"product_id": a.id, "quantity": 2}, {"product_id": b.id, "quantity": 2}],
        **meta,
    })

    assert resp.status_code == 409
    assert resp.json()["product_id"] == b.id
    assert client.get(f"/products/{a.id}").json()["available_quantity"] == 10

    resp = client.post("/withdrawals/batch", json={
        "items": [{"product_id": a.id, "quantity": 2}, {"product_id": b.id, "quantity": 1}],
        **meta,
    })

    assert resp.status_code == 201
    assert [i["new_stock"] for i in resp.json()["items"]] == [8, 0]


def test_history_is_admin_only(client, auth_headers, make_product, meta):
    banner = make_product("Banner", 10)
    created = client.post("/withdrawals", json={"product_id": banner.id, "quantity": 1, **meta}).json()

    assert client.get("/withdrawals").status_code in (401, 403)

    resp = client.get("/withdrawals", params={"search": "centro"}, headers=auth_headers)
    assert resp.status_code == 200
    assert [w["id"] for w in resp.json()] == [created["withdrawal"]["id"]]

    one = client.get(f"/withdrawals/{created['withdrawal']['id']}", headers=auth_headers)
    assert one.json()["supervisor"] == "Maria"
    assert client.get("/withdrawals/999", headers=auth_headers).status_code == 404
    assert client.get("/withdrawals", params={"date_from": "yesterday"}, headers=auth_headers).status_code == 400


# ---- stock ----

def test_validate_endpoint(client, make_product):
    banner = make_product("Banner", 4)

    ok = client.post("/stock/validate", json={"product_id": banner.id, "quantity": 4}).json()
    short = client.post("/stock/validate", json={"product_id": banner.id, "quantity": 9}).json()

    assert ok == {"valid": True, "available_stock": 4, "message": None}
    assert short["valid"] is False
    assert short["message"] == "Insufficient stock. Available: 4"


def test_add_and_remove_stock(client, auth_headers, make_product):
    banner = make_product("Banner", 4)

    added = client.post(f"/stock/{banner.id}/add", json={"quantity": 6}, headers=auth_headers)
    assert added.json() == {"previous_stock": 4, "new_stock": 10}

    removed = client.post(f"/stock/{banner.id}/remove", json={"quantity": 3, "reason": "damaged"},
                          headers=auth_headers)
    assert removed.status_code == 200
    body = removed.json()
    assert body["new_stock"] == 7
    assert body["adjustment"]["kind"] == "MANUAL_ADJUSTMENT"
    assert body["adjustment"]["destination"] == "AJUSTE_MANUAL"
    assert body["adjustment"]["supervisor"] == "SISTEMA"

    too_much = client.post(f"/stock/{banner.id}/remove", json={"quantity": 30}, headers=auth_headers)
    assert too_much.status_code == 409

    assert client.post(f"/stock/{banner.id}/add", json={"quantity": 1}).status_code in (401, 403)
    assert client.post("/stock/999/add", json={"quantity": 1}, headers=auth_headers).status_code == 404


def test_add_materials_endpoint(client):
    first = client.post("/stock/materials", json={"name": "Adesivo", "category": "grafico", "quantity": 5})
    again = client.post("/stock/materials", json={"name": "adesivo", "category": "grafico", "quantity": 2})

    assert first.json()["created"] is True
    assert again.json()["created"] is False
    assert again.json()["new_stock"] == 7
    assert again.json()["product"]["id"] == first.json()["product"]["id"]


# ---- admin panel ----

def test_dashboard_endpoints(client, auth_headers, make_product, meta):
    banner = make_product("Banner", 40)
    make_product("Caneta", 2, category="brindes")
    client.post("/withdrawals", json={"product_id": banner.id, "quantity": 5, **meta})

    stats = client.get("/dashboard", headers=auth_headers).json()
    assert stats["total_products"] == 2
    assert stats["total_withdrawals_today"] == 5
    assert stats["low_stock_products"] == 1

    quick = client.get("/dashboard/quick", headers=auth_headers).json()
    assert quick["withdrawals_month"] == 5

    categories = client.get("/dashboard/categories", headers=auth_headers).json()
    assert sum(c["percentage"] for c in categories) == 100

    movements = client.get("/dashboard/movements", headers=auth_headers).json()
    assert movements["top_products"] == [{"name": "Banner", "quantity": 5}]

    low = client.get("/reports/low-stock", params={"threshold": 2}, headers=auth_headers).json()
    assert low["total"] == 1
    assert low["items"][0]["name"] == "Caneta"

    assert client.get("/dashboard").status_code in (401, 403)


def test_logs_endpoint(client, auth_headers):
    resp = client.get("/logs", params={"action": "login"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == 1
    assert resp.json()["items"][0]["status"] == "SUCCESS"


def test_logs_filters_and_paging(client, auth_headers, admin, make_product, meta):
    banner = make_product("Banner", 10)
    for _ in range(3):
        client.post("/withdrawals", json={"product_id": banner.id, "quantity": 1, **meta})

    kiosk = client.get("/logs", params={"resource": "withdrawals", "page_size": 2}, headers=auth_headers).json()
    assert kiosk["total"] == 3
    assert len(kiosk["items"]) == 2
    assert all(item["admin_id"] is None for item in kiosk["items"])

    mine = client.get("/logs", params={"admin_id": admin.id}, headers=auth_headers).json()
    assert [item["action"] for item in mine["items"]] == ["LOGIN"]

    assert client.get("/logs", params={"date_to": "31/12/2024"}, headers=auth_headers).status_code == 400


# ---- auth ----

def test_login_failure_is_logged(client, admin, db):
    resp = client.post("/auth/login", json={"email": admin.email, "password": "wrong-password"})

    assert resp.status_code == 401
    entry = db.query(Log).one()
    assert entry.status == "FAIL"
    assert entry.admin_id == admin.id


def test_me(client, auth_headers):
    resp = client.get("/auth/me", headers=auth_headers)
    assert resp.json()["email"] == "admin@materials.com"


def test_expired_token_is_rejected(client, admin):
    token = create_access_token({"sub": admin.email}, expires_delta=timedelta(minutes=-1))
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_create_admin_rules(db, admin):
    with pytest.raises(ValidationFailure):
        create_admin(db, "ADMIN@materials.com", "Other", "long-enough")
    with pytest.raises(ValidationFailure):
        create_admin(db, "new@materials.com", "New", "short")


# ---- uploads ----

def test_upload_image(client, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

    resp = client.post("/files/signatures", files={"file": ("sig.png", io.BytesIO(b"\x89PNG data"), "image/png")})

    assert resp.status_code == 201
    url = resp.json()["url"]
    assert url.startswith("/uploads/signatures/") and url.endswith(".png")
    assert (tmp_path / Path(url).relative_to("/uploads")).exists()


def test_upload_rejections(client, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)

    wrong_type = client.post("/files/photos", files={"file": ("a.txt", io.BytesIO(b"hi"), "text/plain")})
    too_big = client.post("/files/photos", files={"file": ("a.png", io.BytesIO(b"123456"), "image/png")})
    bad_kind = client.post("/files/invoices", files={"file": ("a.png", io.BytesIO(b"1"), "image/png")})

    assert wrong_type.status_code == 400
    assert too_big.status_code == 400
    assert bad_kind.status_code == 422


# ---- audit failures after commit ----

def test_withdrawal_is_reported_when_audit_write_fails(client, make_product, meta, monkeypatch):
    banner = make_product("Banner", 10)

    def broken_write_log(db, **entry):
        raise StoreFailure("Failed to write audit log")

    monkeypatch.setattr(utils.audit, "write_log", broken_write_log)

    resp = client.post("/withdrawals", json={"product_id": banner.id, "quantity": 4, **meta})

    assert resp.status_code == 201
    assert resp.json()["new_stock"] == 6
    assert client.get(f"/products/{banner.id}").json()["available_quantity"] == 6


def test_committed_actions_survive_missing_audit_table(client, engine, make_product, meta):
    a = make_product("Banner", 10)
    b = make_product("Caneta", 5, category="brindes")
    Log.__table__.drop(engine)

    single = client.post("/withdrawals", json={"product_id": a.id, "quantity": 1, **meta})
    batch = client.post("/withdrawals/batch", json={
        "items": [{"product_id": a.id, "quantity": 2}, {"product_id": b.id, "quantity": 1}], **meta,
    })
    materials = client.post("/stock/materials", json={"name": "Adesivo", "category": "grafico", "quantity": 3})

    assert single.status_code == 201
    assert batch.status_code == 201
    assert materials.status_code == 200
    assert client.get(f"/products/{a.id}").json()["available_quantity"] == 7


# ---- product edits with explicit nulls ----

@pytest.mark.parametrize("field", ["available_quantity", "cover_image_index", "name", "category"])
def test_patch_rejects_null_for_required_fields(client, auth_headers, make_product, field):
    banner = make_product("Banner", 5)

    resp = client.patch(f"/products/{banner.id}", json={field: None}, headers=auth_headers)

    assert resp.status_code == 400
    assert client.get(f"/products/{banner.id}").json()["available_quantity"] == 5


# ---- add materials image limit ----

def test_add_materials_removes_image_pushed_out(client, make_product, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    folder = tmp_path / "products"
    folder.mkdir()
    for name in ("a.png", "b.png", "c.png", "new.png"):
        (folder / name).write_bytes(b"img")
    make_product("Banner", 2, image_urls=[f"/uploads/products/{n}" for n in ("a.png", "b.png", "c.png")])

    resp = client.post("/stock/materials", json={
        "name": "Banner", "category": "grafico", "quantity": 3, "image_url": "/uploads/products/new.png",
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["product"]["image_urls"] == [
        "/uploads/products/new.png", "/uploads/products/a.png", "/uploads/products/b.png",
    ]
    assert body["dropped_images"] == ["/uploads/products/c.png"]
    assert (body["previous_stock"], body["new_stock"]) == (2, 5)
    assert not (folder / "c.png").exists()
    assert (folder / "a.png").exists()
