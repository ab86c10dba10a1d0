def _attend_completed_event(client, admin, student, event, auth_headers):
    client.post(f"/event/{event.id}/register", headers=auth_headers(student))
    client.put(f"/event/{event.id}/attendance/{student.id}", headers=auth_headers(admin), json={"attended": True})
    client.put(f"/event/status/{event.id}", headers=auth_headers(admin), json={"status": "completed"})


def test_certificate_for_attended_completed_event(client, admin, student, make_event, auth_headers):
    event = make_event(title="Data Science Bootcamp")
    _attend_completed_event(client, admin, student, event, auth_headers)

    listing = client.get("/user/certificates", headers=auth_headers(student)).json()["data"]
    response = client.get(f"/user/certificates/{event.id}", headers=auth_headers(student))

    assert [item["title"] for item in listing] == ["Data Science Bootcamp"]
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"certificate_{event.id}_{student.id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_no_certificate_without_attendance(client, admin, student, make_event, auth_headers):
    event = make_event()
    client.post(f"/event/{event.id}/register", headers=auth_headers(student))
    client.put(f"/event/status/{event.id}", headers=auth_headers(admin), json={"status": "completed"})

    listing = client.get("/user/certificates", headers=auth_headers(student)).json()["data"]
    response = client.get(f"/user/certificates/{event.id}", headers=auth_headers(student))

    assert listing == []
    assert response.status_code == 403


def test_no_certificate_before_completion(client, admin, student, make_event, auth_headers):
    event = make_event()
    client.post(f"/event/{event.id}/register", headers=auth_headers(student))
    client.put(f"/event/{event.id}/attendance/{student.id}", headers=auth_headers(admin), json={"attended": True})

    assert client.get(f"/user/certificates/{event.id}", headers=auth_headers(student)).status_code == 403
    assert client.get("/user/certificates/4040", headers=auth_headers(student)).status_code == 404
