from linkhub.extensions import db
from linkhub.models import User


def _create_user(app, email: str, password: str):
    with app.app_context():
        user = User(email=email)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.get_id()


def _sign_in(client, email: str, password: str):
    response = client.post(
        "/sign-in",
        data={"email": email, "password": password},
        follow_redirects=False,
    )
    assert response.status_code == 302


def _api_create(client, username="grace-h", links=None, theme=None):
    payload = {
        "username": username,
        "links": links or [{"title": "Site", "url": "site.io", "category": "Work"}],
    }
    if theme:
        payload["theme"] = theme
    return client.post("/api/v1/profiles", json=payload)


def _signed_in_client(app, email="grace@example.com", password="secret"):
    _create_user(app, email, password)
    client = app.test_client()
    _sign_in(client, email, password)
    return client


def test_sign_up_signs_the_user_in(client):
    response = client.post(
        "/sign-up",
        data={
            "email": "Ada@Example.com",
            "password": "secret",
            "confirm_password": "secret",
        },
        follow_redirects=False,
    )
    assert response.status_code == 302

    response = client.get("/create-linkhub")
    assert response.status_code == 200


def test_sign_in_rejects_bad_password(app, client):
    _create_user(app, "ada@example.com", "secret")

    response = client.post(
        "/sign-in", data={"email": "ada@example.com", "password": "nope"}
    )

    assert response.status_code == 200
    assert b"Invalid credentials." in response.data


def test_api_health_and_themes(client):
    assert client.get("/api/v1/health").get_json()["status"] == "ok"

    themes = client.get("/api/v1/themes").get_json()["items"]
    assert len(themes) == 9
    assert themes[0]["id"] == "dark"


def test_api_create_profile(app):
    client = _signed_in_client(app)

    response = _api_create(client, username="  Grace-H ", theme="blue")

    assert response.status_code == 201
    created = response.get_json()
    assert created["username"] == "grace-h"
    assert created["theme"] == "blue"
    assert created["version"] == 1
    assert created["links"][0]["url"] == "https://site.io"
    assert created["links"][0]["category"] == "Work"


def test_api_create_profile_requires_sign_in(client):
    response = _api_create(client)

    assert response.status_code == 401


def test_api_create_profile_validation(app):
    client = _signed_in_client(app)

    bad_username = _api_create(client, username="a b")
    no_links = client.post("/api/v1/profiles", json={"username": "grace-h"})
    bad_url = _api_create(client, links=[{"title": "Site", "url": "not a url"}])
    bad_theme = _api_create(client, theme="plaid")

    assert bad_username.status_code == 400
    assert no_links.status_code == 400
    assert no_links.get_json()["error"] == "Please add at least one link"
    assert bad_url.status_code == 400
    assert bad_theme.status_code == 400


def test_api_duplicate_username_conflicts(app):
    client = _signed_in_client(app)
    assert _api_create(client).status_code == 201

    other = _signed_in_client(app, email="eve@example.com")
    response = _api_create(other, username="GRACE-H")

    assert response.status_code == 409


def test_username_availability(app):
    client = _signed_in_client(app)
    _api_create(client)

    taken = client.get("/api/v1/usernames/grace-h/availability?seq=7").get_json()
    short = client.get("/api/v1/usernames/ab/availability").get_json()
    free = client.get("/api/v1/usernames/Fresh-Name/availability?seq=8").get_json()

    assert taken == {"username": "grace-h", "status": "taken", "seq": 7}
    assert short["status"] == "invalid"
    assert short["seq"] is None
    assert free == {"username": "fresh-name", "status": "available", "seq": 8}


def test_api_link_lifecycle(app):
    client = _signed_in_client(app)
    created = _api_create(client).get_json()
    first_id = created["links"][0]["id"]

    added = client.post(
        "/api/v1/profiles/grace-h/links",
        json={"title": "Blog", "url": "blog.example.com", "category": "Personal"},
    )
    assert added.status_code == 201
    body = added.get_json()
    second_id = body["link"]["id"]
    assert second_id > first_id
    assert body["version"] == 2
    assert [link["id"] for link in body["links"]] == [first_id, second_id]

    patched = client.patch(
        f"/api/v1/profiles/grace-h/links/{second_id}", json={"title": "Writing"}
    )
    assert patched.status_code == 200
    assert patched.get_json()["link"]["title"] == "Writing"
    assert patched.get_json()["link"]["url"] == "https://blog.example.com"

    reordered = client.post(
        "/api/v1/profiles/grace-h/links/reorder",
        json={"from_id": second_id, "to_id": first_id},
    )
    assert reordered.status_code == 200
    assert [link["id"] for link in reordered.get_json()["links"]] == [
        second_id,
        first_id,
    ]

    themed = client.put("/api/v1/profiles/grace-h/theme", json={"theme": "green"})
    assert themed.status_code == 200
    assert themed.get_json()["theme"] == "green"

    deleted = client.delete(f"/api/v1/profiles/grace-h/links/{first_id}")
    assert deleted.status_code == 200
    assert [link["id"] for link in deleted.get_json()["links"]] == [second_id]

    again = client.delete(f"/api/v1/profiles/grace-h/links/{first_id}")
    assert again.status_code == 200

    profile = client.get("/api/v1/profiles/grace-h").get_json()
    assert profile["theme"] == "green"
    assert profile["is_owner"] is True
    assert [link["title"] for link in profile["links"]] == ["Writing"]


def test_api_edit_errors(app):
    client = _signed_in_client(app)
    _api_create(client)

    missing_link = client.patch("/api/v1/profiles/grace-h/links/1", json={})
    bad_reorder = client.post(
        "/api/v1/profiles/grace-h/links/reorder", json={"from_id": "x", "to_id": 1}
    )
    bad_theme = client.put("/api/v1/profiles/grace-h/theme", json={"theme": "plaid"})
    missing_profile = client.post(
        "/api/v1/profiles/nobody/links", json={"title": "A", "url": "a.io"}
    )

    assert missing_link.status_code == 404
    assert bad_reorder.status_code == 400
    assert bad_theme.status_code == 400
    assert missing_profile.status_code == 404


def test_api_rejects_malformed_fields(app):
    client = _signed_in_client(app)
    _api_create(client)
    links_url = "/api/v1/profiles/grace-h/links"

    responses = [
        client.post(links_url, json={"title": "x", "url": "http://[bad"}),
        client.post(links_url, json={"title": "x", "url": "[oops"}),
        client.post(links_url, json={"title": 42, "url": "site.io"}),
        client.post(links_url, json={"title": "x", "url": "site.io", "category": 1}),
        client.put("/api/v1/profiles/grace-h/theme", json={"theme": 7}),
        _api_create(client, username=42),
        _api_create(client, username="ada-l", theme=["blue"]),
        _api_create(client, username="ada-l", links=[{"title": True, "url": "a.io"}]),
    ]

    assert [response.status_code for response in responses] == [400] * 8
    assert responses[0].get_json()["error"] == "Please enter a valid URL"
    assert responses[2].get_json()["error"] == "Title must be text"
    profile = client.get("/api/v1/profiles/grace-h").get_json()
    assert [link["title"] for link in profile["links"]] == ["Site"]
    assert profile["version"] == 1
    assert client.get("/api/v1/profiles/ada-l").status_code == 404


def test_web_add_link_with_malformed_url_flashes_error(app):
    client = _signed_in_client(app)
    _api_create(client)

    response = client.post(
        "/edit-profile/grace-h/links",
        data={"title": "Broken", "url": "http://[bad"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    assert b"Please enter a valid URL" in response.data
    links = client.get("/api/v1/profiles/grace-h").get_json()["links"]
    assert [link["title"] for link in links] == ["Site"]


def test_api_featured_profiles_follow_config_limit(app):
    client = _signed_in_client(app)
    for username in ("grace-h", "ada-l", "alan-t"):
        _api_create(client, username=username)
    app.config["FEATURED_PROFILE_LIMIT"] = 2

    featured = client.get("/api/v1/profiles").get_json()["items"]
    explicit = client.get("/api/v1/profiles?limit=1").get_json()["items"]

    assert len(featured) == 2
    assert len(explicit) == 1


def test_app_wires_extensions(app):
    assert "sqlalchemy" in app.extensions
    assert "migrate" in app.extensions
    assert "profile_store" in app.extensions
    assert "init-db" in app.cli.commands


def test_api_stale_version_conflicts(app):
    client = _signed_in_client(app)
    _api_create(client)
    client.put("/api/v1/profiles/grace-h/theme", json={"theme": "red", "version": 1})

    response = client.put(
        "/api/v1/profiles/grace-h/theme", json={"theme": "blue", "version": 1}
    )

    assert response.status_code == 409
    assert client.get("/api/v1/profiles/grace-h").get_json()["theme"] == "red"


def test_api_non_owner_cannot_edit(app):
    owner = _signed_in_client(app)
    _api_create(owner)
    other = _signed_in_client(app, email="eve@example.com")

    response = other.post(
        "/api/v1/profiles/grace-h/links", json={"title": "Spam", "url": "spam.io"}
    )

    assert response.status_code == 403
    assert other.get("/api/v1/profiles/grace-h").get_json()["is_owner"] is False


def test_api_unauthenticated_edit_is_rejected(app, client):
    owner = _signed_in_client(app)
    _api_create(owner)

    response = client.put("/api/v1/profiles/grace-h/theme", json={"theme": "red"})

    assert response.status_code == 401


def test_api_profile_filters_and_groups(app):
    client = _signed_in_client(app)
    _api_create(
        client,
        links=[
            {
                "title": "Robotics Club",
                "url": "robots.example.com",
                "category": "Clubs",
            },
            {"title": "Thesis", "url": "lab.example.com", "category": "Research"},
            {"title": "Chess Club", "url": "chess.example.com", "category": "Clubs"},
        ],
    )

    by_title = client.get("/api/v1/profiles/grace-h?q=club").get_json()
    by_category = client.get("/api/v1/profiles/grace-h?category=Research").get_json()
    unknown = client.get("/api/v1/profiles/nobody")

    assert [link["title"] for link in by_title["visible_links"]] == [
        "Robotics Club",
        "Chess Club",
    ]
    assert [group["category"] for group in by_title["groups"]] == ["Clubs"]
    assert [link["title"] for link in by_category["visible_links"]] == ["Thesis"]
    assert len(by_category["links"]) == 3
    assert unknown.status_code == 404


def test_api_profile_list_and_search(app):
    client = _signed_in_client(app)
    _api_create(client, username="grace-h")
    _api_create(client, username="ada-l", links=[{"title": "Engines", "url": "e.io"}])

    featured = client.get("/api/v1/profiles").get_json()["items"]
    found = client.get("/api/v1/profiles?q=engines").get_json()["items"]

    assert {item["username"] for item in featured} == {"grace-h", "ada-l"}
    assert found[0]["username"] == "ada-l"
    assert "link_title_contains" in found[0]["match_reasons"]


def test_create_linkhub_requires_sign_in(client):
    response = client.get("/create-linkhub", follow_redirects=False)

    assert response.status_code == 302
    assert "/sign-in" in response.headers["Location"]


def test_web_create_and_view_profile(app):
    client = _signed_in_client(app)

    response = client.post(
        "/create-linkhub",
        data={
            "username": "Grace-H",
            "theme": "purple",
            "title_0": "Portfolio",
            "url_0": "portfolio.example.com",
            "category_0": "Projects",
        },
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/profile/grace-h")

    page = client.get("/profile/grace-h")
    assert page.status_code == 200
    assert b"Portfolio" in page.data
    assert b"https://portfolio.example.com" in page.data
    assert b"--profile-background" in page.data
    assert b"/profile/grace-h" in page.data
    assert b"Edit LinkHub" in page.data

    empty = client.get("/profile/grace-h?q=nothing-here")
    assert b"No links match your filters." in empty.data


def test_web_create_requires_a_link(app):
    client = _signed_in_client(app)

    response = client.post("/create-linkhub", data={"username": "grace-h"})

    assert response.status_code == 200
    assert b"Please add at least one link" in response.data


def test_web_missing_profile_is_not_found(client):
    response = client.get("/profile/nobody")

    assert response.status_code == 404
    assert b"@nobody" in response.data


def test_web_owner_edits_links(app):
    client = _signed_in_client(app)
    _api_create(client)

    page = client.get("/edit-profile/grace-h")
    assert page.status_code == 200

    response = client.post(
        "/edit-profile/grace-h/links",
        data={"title": "Blog", "url": "blog.example.com", "category": "Personal"},
        follow_redirects=True,
    )
    assert response.status_code == 200
    assert b"Your link has been added successfully" in response.data

    links = client.get("/api/v1/profiles/grace-h").get_json()["links"]
    assert [link["title"] for link in links] == ["Site", "Blog"]

    response = client.post(
        "/edit-profile/grace-h/theme",
        data={"theme": "orange", "version": "1"},
        follow_redirects=True,
    )
    assert b"Failed to update theme" in response.data
    assert client.get("/api/v1/profiles/grace-h").get_json()["theme"] == "dark"


def test_web_non_owner_is_sent_back_to_profile(app):
    owner = _signed_in_client(app)
    _api_create(owner)
    other = _signed_in_client(app, email="eve@example.com")

    response = other.get("/edit-profile/grace-h", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/profile/grace-h")


def test_home_lists_user_profiles(app):
    client = _signed_in_client(app)
    _api_create(client)

    response = client.get("/")

    assert response.status_code == 200
    assert b"@grace-h" in response.data


def test_ui_mode_toggle_persists_in_cookie(client):
    assert b'class="light"' in client.get("/").data

    response = client.post(
        "/ui-mode/toggle", data={"next": "/sign-in"}, follow_redirects=False
    )
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/sign-in")
    assert "ui_mode=dark" in response.headers["Set-Cookie"]

    assert b'class="dark"' in client.get("/sign-in").data

    client.post("/ui-mode/toggle")
    assert b'class="light"' in client.get("/").data


def test_ui_mode_follows_system_preference(client):
    response = client.get("/", headers={"Sec-CH-Prefers-Color-Scheme": "dark"})

    assert b'class="dark"' in response.data
