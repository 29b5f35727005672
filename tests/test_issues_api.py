"""HTTP-level tests for issues, dashboard, home and map routes."""

from campus_issues.routers import map as map_router

from conftest import auth_header


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_unknown_route_gets_not_found_page(client):
    r = client.get("/no/such/page")
    assert r.status_code == 404
    assert r.json() == {"detail": "Page not found", "path": "/no/such/page"}


def test_missing_issue_keeps_its_own_detail(client):
    r = client.get("/issues/4242")
    assert r.status_code == 404
    assert r.json() == {"detail": "Issue not found"}


def test_options(client):
    body = client.get("/issues/options").json()
    assert "Infrastructure & Maintenance" in body["categories"]
    assert body["priorities"] == ["Low", "Medium", "High", "Critical"]
    assert body["statuses"][0] == "Reported"


def test_register_login_me(client):
    r = client.post("/auth/register", json={"name": "Asha", "email": "Asha@igdtuw.ac.in", "password": "longenough"})
    assert r.status_code == 201
    token = client.post("/auth/login", json={"email": "asha@igdtuw.ac.in", "password": "longenough"}).json()
    assert set(token) == {"access_token", "token_type", "expires_in"}
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"}).json()
    assert me["email"] == "asha@igdtuw.ac.in"

    dup = client.post("/auth/register", json={"name": "Asha", "email": "asha@igdtuw.ac.in", "password": "longenough"})
    assert dup.status_code == 400


def test_listing_is_public(client, make_issue):
    make_issue(title="Broken cooler")
    r = client.get("/issues")
    assert r.status_code == 200
    assert [i["title"] for i in r.json()] == ["Broken cooler"]


class TestStatusChange:
    def test_owner_can_change_status(self, client, make_user, make_issue):
        owner = make_user()
        issue = make_issue(owner)
        r = client.patch(f"/issues/{issue.id}/status", json={"status": "In Progress"}, headers=auth_header(owner))
        assert r.status_code == 200
        assert r.json()["status"] == "In Progress"

    def test_admin_can_change_status(self, client, make_issue, admin_header):
        issue = make_issue()
        r = client.patch(f"/issues/{issue.id}/status", json={"status": "Resolved"}, headers=admin_header)
        assert r.status_code == 200
        assert r.json()["status"] == "Resolved"

    def test_other_user_is_forbidden(self, client, make_user, make_issue):
        issue = make_issue(make_user("owner@igdtuw.ac.in"))
        other = make_user("other@igdtuw.ac.in")
        r = client.patch(f"/issues/{issue.id}/status", json={"status": "Resolved"}, headers=auth_header(other))
        assert r.status_code == 403

    def test_anonymous_needs_sign_in(self, client, make_issue):
        issue = make_issue()
        r = client.patch(f"/issues/{issue.id}/status", json={"status": "Resolved"})
        assert r.status_code == 401

    def test_unknown_status_value(self, client, make_issue, admin_header):
        issue = make_issue()
        r = client.patch(f"/issues/{issue.id}/status", json={"status": "Closed"}, headers=admin_header)
        assert r.status_code == 422


class TestDelete:
    def test_owner_deletes(self, client, make_user, make_issue):
        owner = make_user()
        issue_id = make_issue(owner).id
        r = client.delete(f"/issues/{issue_id}", headers=auth_header(owner))
        assert r.json() == {"ok": True}
        assert client.get(f"/issues/{issue_id}").status_code == 404
        assert all(i["id"] != issue_id for i in client.get("/issues").json())

    def test_admin_session_cannot_delete(self, client, make_user, make_issue, admin_header):
        owner = make_user()
        issue = make_issue(owner)
        r = client.delete(f"/issues/{issue.id}", headers={**auth_header(owner), **admin_header})
        assert r.status_code == 403
        assert r.json()["detail"] == "Administrators cannot delete issues"

    def test_non_owner_cannot_delete(self, client, make_user, make_issue):
        issue = make_issue(make_user("owner@igdtuw.ac.in"))
        r = client.delete(f"/issues/{issue.id}", headers=auth_header(make_user("other@igdtuw.ac.in")))
        assert r.status_code == 403

    def test_anonymous_cannot_delete(self, client, make_issue):
        assert client.delete(f"/issues/{make_issue().id}").status_code == 401


class TestUpvoteRoutes:
    def test_toggle_and_check(self, client, make_user, make_issue):
        user = make_user()
        issue = make_issue()
        headers = auth_header(user)

        r = client.post(f"/issues/{issue.id}/upvote", headers=headers)
        assert r.json() == {"issue_id": issue.id, "upvoted": True, "upvote_count": 1}
        assert client.get(f"/issues/{issue.id}/upvote", headers=headers).json()["upvoted"] is True

        r = client.post(f"/issues/{issue.id}/upvote", headers=headers)
        assert r.json()["upvote_count"] == 0

    def test_anonymous_check_is_false_and_toggle_needs_sign_in(self, client, make_issue):
        issue = make_issue()
        assert client.get(f"/issues/{issue.id}/upvote").json()["upvoted"] is False
        assert client.post(f"/issues/{issue.id}/upvote").status_code == 401


class TestResponses:
    def test_admin_and_user_responses(self, client, make_user, make_issue, admin_header):
        user = make_user()
        issue = make_issue(user)

        r = client.post(
            f"/issues/{issue.id}/responses",
            json={"response_text": "Any update?", "response_type": "comment"},
            headers=auth_header(user),
        )
        assert r.status_code == 201
        assert r.json()["is_admin_response"] is False

        r = client.post(
            f"/issues/{issue.id}/responses",
            json={"response_text": "Electrician booked for Monday."},
            headers=admin_header,
        )
        assert r.status_code == 201
        assert r.json()["is_admin_response"] is True
        assert r.json()["response_type"] == "update"

        listed = client.get(f"/issues/{issue.id}/responses").json()
        assert [x["response_text"] for x in listed] == ["Electrician booked for Monday.", "Any update?"]

    def test_anonymous_response_rejected(self, client, make_issue):
        issue = make_issue()
        r = client.post(f"/issues/{issue.id}/responses", json={"response_text": "hi"})
        assert r.status_code == 401

    def test_history_route(self, client, make_issue):
        issue = make_issue()
        assert client.get(f"/issues/{issue.id}/history").json() == []


class TestDashboard:
    def test_requires_sign_in(self, client):
        assert client.get("/dashboard").status_code == 401

    def test_user_view(self, client, make_user, make_issue):
        user = make_user()
        cooler = make_issue(title="Broken cooler", latitude=28.67, longitude=77.23)
        make_issue(title="Flickering lights", category="Safety & Security")
        client.post(f"/issues/{cooler.id}/upvote", headers=auth_header(user))

        body = client.get("/dashboard", params={"search": "cooler"}, headers=auth_header(user)).json()

        assert [i["title"] for i in body["issues"]] == ["Broken cooler"]
        assert body["total_matching"] == 1
        assert body["stats"]["total_issues"] == 2
        assert body["upvoted_issue_ids"] == [cooler.id]
        assert set(body["categories"]) == {"WiFi & Technology", "Safety & Security"}
        assert len(body["map_pins"]) == 1
        assert body["viewer"] == {"user_id": user.id, "is_admin": False}

    def test_admin_view(self, client, make_issue, admin_header):
        make_issue()
        body = client.get("/dashboard", headers=admin_header).json()
        assert body["viewer"] == {"user_id": None, "is_admin": True}
        assert body["upvoted_issue_ids"] == []


def test_home_page(client, make_issue):
    for n in range(7):
        make_issue(title=f"Issue {n}")
    body = client.get("/").json()
    assert body["stats"]["total_issues"] == 7
    assert body["stats"]["active_users"] == 4
    assert len(body["recent_issues"]) == 5


class TestMapRoutes:
    def setup_method(self):
        for pin in map_router.pin_board.pins():
            map_router.pin_board.remove(pin.id)

    def test_locate(self, client):
        body = client.post("/map/locate", json={"x": 50, "y": 50}).json()
        assert body["address"] == "Location: 28.6692, 77.2265"

    def test_locate_rejects_off_surface(self, client):
        assert client.post("/map/locate", json={"x": 120, "y": 50}).status_code == 422

    def test_custom_pin_lifecycle(self, client, make_issue):
        make_issue(title="Pinned issue", latitude=28.6692, longitude=77.2265)

        r = client.post("/map/pins", json={"x": 25, "y": 75, "title": "Water cooler"})
        assert r.status_code == 201
        pin = r.json()
        assert pin["type"] == "custom"

        pins = client.get("/map/pins").json()
        assert {p["type"] for p in pins} == {"issue", "custom"}
        assert client.get(f"/map/pins/{pin['id']}").json()["title"] == "Water cooler"

        assert client.delete(f"/map/pins/{pin['id']}").json() == {"ok": True}
        assert client.delete(f"/map/pins/{pin['id']}").status_code == 404

    def test_issue_pin_detail(self, client, make_issue):
        issue = make_issue(latitude=28.6692, longitude=77.2265)
        body = client.get(f"/map/pins/{issue.id}").json()
        assert body["type"] == "issue"
        assert body["x"] == 50 and body["y"] == 50

    def test_pin_without_title(self, client):
        r = client.post("/map/pins", json={"x": 25, "y": 75, "title": " "})
        assert r.status_code == 400
        assert r.json()["detail"] == "Please provide a title for the pin."
