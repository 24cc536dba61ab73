ITEMS = "/api/v1/items"


def new_item(**overrides):
    item = {
        "cat_no": "AB100",
        "product_name": "Amoxicillin 500mg",
        "lot_no": "L-2291",
        "hsn_no": "3004",
        "quantity": 50,
        "w_rate": 80,
        "selling_price": 100,
        "mrp": 120,
    }
    item.update(overrides)
    return item


def test_create_item(client, user, auth_headers):
    response = client.post(ITEMS, json=new_item(user_id=user.id), headers=auth_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["user_id"] == user.id
    assert body["cat_no"] == "AB100"
    assert body["quantity"] == 50
    assert body["mrp"] == 120.0


def test_create_item_takes_owner_from_token(client, user, auth_headers):
    response = client.post(ITEMS, json=new_item(), headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["user_id"] == user.id


def test_create_item_for_another_user_is_forbidden(client, other_user, auth_headers):
    response = client.post(ITEMS, json=new_item(user_id=other_user.id), headers=auth_headers)
    assert response.status_code == 403


def test_create_duplicate_cat_no_conflicts(client, make_item, auth_headers):
    make_item(cat_no="AB100")
    response = client.post(ITEMS, json=new_item(cat_no="AB100"), headers=auth_headers)
    assert response.status_code == 409
    assert response.json() == {"error": "A product with this catalog number already exists."}


def test_create_reports_every_invalid_field(client, auth_headers):
    response = client.post(
        ITEMS,
        json={"cat_no": "", "product_name": "Paracetamol", "quantity": 0, "mrp": -1},
        headers=auth_headers,
    )
    assert response.status_code == 400
    problems = response.json()["validationErrors"]
    assert len(problems) == 3
    assert {p.split(":")[0] for p in problems} == {"cat_no", "quantity", "mrp"}


def test_get_by_id_and_cat_no(client, make_item, auth_headers):
    item = make_item(cat_no="PCM650", product_name="Paracetamol 650")
    by_id = client.get(f"{ITEMS}/{item.id}", headers=auth_headers)
    by_cat = client.get(f"{ITEMS}/cat-no/PCM650", headers=auth_headers)
    assert by_id.status_code == by_cat.status_code == 200
    assert by_id.json() == by_cat.json()
    assert by_cat.json()["product_name"] == "Paracetamol 650"


def test_unknown_cat_no_is_not_found(client, user, auth_headers):
    response = client.get(f"{ITEMS}/cat-no/NOPE", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Item not found"}


def test_other_shops_item_is_not_visible(client, make_item, other_user, other_headers):
    item = make_item(cat_no="AB100")
    assert client.get(f"{ITEMS}/{item.id}", headers=other_headers).status_code == 404
    assert client.get(f"{ITEMS}/cat-no/AB100", headers=other_headers).status_code == 404


def test_search_by_cat_no_prefix_case_insensitive(client, user, make_item, auth_headers):
    make_item(cat_no="AB100")
    make_item(cat_no="ab200")
    make_item(cat_no="XY300")
    response = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "cat_no", "searchTerm": "Ab"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [item["cat_no"] for item in body["items"]] == ["AB100", "ab200"]


def test_search_by_product_name_matches_prefix_only(client, user, make_item, auth_headers):
    make_item(cat_no="A1", product_name="Paracetamol 500")
    make_item(cat_no="A2", product_name="Para Gel")
    make_item(cat_no="A3", product_name="Cough Syrup Para")
    response = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "product_name", "searchTerm": "para"},
        headers=auth_headers,
    )
    assert response.json()["count"] == 2
    assert {item["cat_no"] for item in response.json()["items"]} == {"A1", "A2"}


def test_search_treats_wildcards_literally(client, user, make_item, auth_headers):
    make_item(cat_no="A_1")
    make_item(cat_no="AB1")
    make_item(cat_no="A%2")
    underscore = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "cat_no", "searchTerm": "A_"},
        headers=auth_headers,
    )
    percent = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "cat_no", "searchTerm": "A%"},
        headers=auth_headers,
    )
    assert [item["cat_no"] for item in underscore.json()["items"]] == ["A_1"]
    assert [item["cat_no"] for item in percent.json()["items"]] == ["A%2"]


def test_search_is_scoped_to_user(client, user, other_user, make_item, auth_headers):
    make_item(cat_no="AB100")
    make_item(cat_no="AB200", owner=other_user)
    response = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "cat_no", "searchTerm": "AB"},
        headers=auth_headers,
    )
    assert [item["cat_no"] for item in response.json()["items"]] == ["AB100"]


def test_search_for_another_user_is_forbidden(client, other_user, auth_headers):
    response = client.get(
        f"{ITEMS}/search",
        params={"userId": other_user.id, "searchType": "cat_no", "searchTerm": "AB"},
        headers=auth_headers,
    )
    assert response.status_code == 403


def test_search_rejects_unknown_type_and_blank_term(client, user, auth_headers):
    bad_type = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "lot_no", "searchTerm": "L"},
        headers=auth_headers,
    )
    blank = client.get(
        f"{ITEMS}/search",
        params={"userId": user.id, "searchType": "cat_no", "searchTerm": "   "},
        headers=auth_headers,
    )
    assert bad_type.status_code == 400
    assert blank.status_code == 400
    assert blank.json()["validationErrors"] == ["searchTerm: cannot be empty"]


def test_listing_is_paginated(client, user, make_item, auth_headers):
    for n in range(5):
        make_item(cat_no=f"P{n}")
    first = client.get(f"{ITEMS}/user/{user.id}", params={"page": 1, "page_size": 2}, headers=auth_headers)
    last = client.get(f"{ITEMS}/user/{user.id}", params={"page": 3, "page_size": 2}, headers=auth_headers)
    assert first.status_code == 200
    body = first.json()
    assert body["total_items"] == 5
    assert body["total_pages"] == 3
    assert body["page"] == 1
    assert len(body["items"]) == 2
    # newest first
    assert body["items"][0]["cat_no"] == "P4"
    assert [item["cat_no"] for item in last.json()["items"]] == ["P0"]


def test_listing_empty_shop(client, user, auth_headers):
    body = client.get(f"{ITEMS}/user/{user.id}", headers=auth_headers).json()
    assert body["items"] == []
    assert body["total_items"] == 0
    assert body["total_pages"] == 0


def test_listing_another_users_items_is_forbidden(client, other_user, auth_headers):
    response = client.get(f"{ITEMS}/user/{other_user.id}", headers=auth_headers)
    assert response.status_code == 403


def test_partial_update_keeps_absent_fields(client, make_item, auth_headers):
    item = make_item(cat_no="AB100", lot_no="L-1")
    response = client.put(f"{ITEMS}/{item.id}", json={"quantity": 75}, headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["quantity"] == 75
    assert body["lot_no"] == "L-1"
    assert body["mrp"] == 120.0


def test_update_can_clear_optional_field(client, make_item, auth_headers):
    item = make_item(cat_no="AB100", lot_no="L-1")
    response = client.put(f"{ITEMS}/{item.id}", json={"lot_no": None}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["lot_no"] is None


def test_update_rejects_null_required_field(client, make_item, auth_headers):
    item = make_item(cat_no="AB100")
    response = client.put(f"{ITEMS}/{item.id}", json={"mrp": None}, headers=auth_headers)
    assert response.status_code == 400


def test_update_to_existing_cat_no_leaves_item_unchanged(client, make_item, auth_headers):
    make_item(cat_no="AB100")
    second = make_item(cat_no="AB200", product_name="Azithromycin")
    response = client.put(
        f"{ITEMS}/{second.id}",
        json={"cat_no": "AB100", "product_name": "Renamed"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["validationErrors"] == ["cat_no: A product with this catalog number already exists."]
    stored = client.get(f"{ITEMS}/{second.id}", headers=auth_headers).json()
    assert stored["cat_no"] == "AB200"
    assert stored["product_name"] == "Azithromycin"


def test_update_to_cat_no_of_another_shop_conflicts(client, make_item, other_user, auth_headers):
    make_item(cat_no="ZZ900", owner=other_user)
    mine = make_item(cat_no="AB100")
    response = client.put(f"{ITEMS}/{mine.id}", json={"cat_no": "ZZ900"}, headers=auth_headers)
    assert response.status_code == 409


def test_delete_item(client, user, make_item, auth_headers):
    item = make_item(cat_no="AB100", product_name="Amoxicillin 500mg")
    response = client.delete(f"{ITEMS}/{item.id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Deleted Amoxicillin 500mg", "id": item.id}
    assert client.get(f"{ITEMS}/{item.id}", headers=auth_headers).status_code == 404
    listing = client.get(f"{ITEMS}/user/{user.id}", headers=auth_headers).json()
    assert listing["total_items"] == 0


def test_delete_unknown_item(client, user, auth_headers):
    assert client.delete(f"{ITEMS}/999", headers=auth_headers).status_code == 404
