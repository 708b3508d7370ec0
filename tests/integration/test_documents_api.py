"""API tests: document upload, signed downloads, metadata-only fallback and delete."""

from eduopps.services import document_service
from eduopps.services.file_storage import StorageError, reset_file_storage

PDF = ("forms.pdf", b"%PDF-1.4 application form", "application/pdf")


class UnavailableStorage:
    def save(self, opportunity_id, filename, content, mime_type):
        raise StorageError("store offline")

    def read(self, object_name):
        raise StorageError("store offline")

    def delete(self, object_name):
        raise StorageError("store offline")


def upload(client, headers, opportunity_id, file=PDF, title="Application Form"):
    return client.post(
        "/api/documents/upload",
        data={"opportunity_id": str(opportunity_id), "title": title},
        files={"file": file},
        headers=headers,
    )


def test_upload_stores_file(client, make_opportunity, teacher, auth_headers, file_storage):
    opp = make_opportunity(teacher)

    response = upload(client, auth_headers(teacher), opp["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["storage_mode"] == "stored"
    assert body["message"] == "Document uploaded successfully"
    assert body["name"] == "Application Form"
    assert body["file_size"] == len(PDF[1])
    assert body["uploaded_by_id"] == teacher["id"]
    assert file_storage.read(body["object_name"]) == PDF[1]


def test_upload_uses_filename_when_title_blank(client, make_opportunity, teacher, auth_headers):
    opp = make_opportunity(teacher)

    response = upload(client, auth_headers(teacher), opp["id"], title="   ")

    assert response.json()["name"] == "forms.pdf"


def test_upload_rejects_unsupported_types_and_empty_files(client, make_opportunity, teacher, auth_headers):
    opp = make_opportunity(teacher)

    script = upload(client, auth_headers(teacher), opp["id"], file=("run.sh", b"echo hi", "application/x-sh"))
    empty = upload(client, auth_headers(teacher), opp["id"], file=("blank.txt", b"", "text/plain"))

    assert script.status_code == 400
    assert empty.status_code == 400


def test_upload_permissions(client, make_user, make_opportunity, teacher, student, other_school, auth_headers):
    opp = make_opportunity(teacher)
    outsider = make_user("teacher", other_school)

    assert upload(client, auth_headers(student), opp["id"]).status_code == 403
    assert upload(client, auth_headers(outsider), opp["id"]).status_code == 403
    assert upload(client, auth_headers(teacher), 9999).status_code == 404


def test_signed_download_link(client, make_opportunity, teacher, student, auth_headers):
    opp = make_opportunity(teacher)
    document = upload(client, auth_headers(teacher), opp["id"]).json()

    link = client.get(f"/api/documents/{document['id']}/download", headers=auth_headers(student))

    assert link.status_code == 200
    body = link.json()
    assert body["expires_in"] == 3600
    assert body["file_name"] == "Application Form"
    assert body["download_url"].startswith(f"http://testserver/api/documents/{document['id']}/file?token=")

    file_response = client.get(body["download_url"])
    assert file_response.status_code == 200
    assert file_response.content == PDF[1]
    assert file_response.headers["content-type"] == "application/pdf"
    assert 'filename="Application_Form"' in file_response.headers["content-disposition"]


def test_download_token_is_bound_to_document(client, make_opportunity, teacher, auth_headers):
    opp = make_opportunity(teacher)
    first = upload(client, auth_headers(teacher), opp["id"]).json()
    second = upload(client, auth_headers(teacher), opp["id"], title="Second").json()
    url = client.get(f"/api/documents/{first['id']}/download", headers=auth_headers(teacher)).json()["download_url"]
    token = url.split("token=")[1]

    assert client.get(f"/api/documents/{second['id']}/file?token={token}").status_code == 401
    assert client.get(f"/api/documents/{first['id']}/file?token=garbage").status_code == 401


def test_metadata_only_fallback(client, make_opportunity, teacher, auth_headers):
    opp = make_opportunity(teacher)
    reset_file_storage(UnavailableStorage())

    response = upload(client, auth_headers(teacher), opp["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["storage_mode"] == "metadata"
    assert body["message"] == "Document uploaded successfully (metadata mode)"
    assert body["object_name"] is None
    assert body["file_path"].startswith("fallback_")
    assert body["file_path"].endswith("_forms.pdf")

    link = client.get(f"/api/documents/{body['id']}/download", headers=auth_headers(teacher))
    assert link.status_code == 503


def test_list_documents_sorted_by_name(client, make_opportunity, make_user, teacher, other_school, auth_headers):
    opp = make_opportunity(teacher)
    upload(client, auth_headers(teacher), opp["id"], title="Zebra guide")
    upload(client, auth_headers(teacher), opp["id"], title="Application Form")

    listed = client.get(f"/api/documents/opportunity/{opp['id']}", headers=auth_headers(teacher)).json()
    outsider = make_user("student", other_school)

    assert [d["name"] for d in listed] == ["Application Form", "Zebra guide"]
    assert client.get(
        f"/api/documents/opportunity/{opp['id']}", headers=auth_headers(outsider)
    ).status_code == 403


def test_form_documents_match_by_name(make_opportunity, teacher):
    opp = make_opportunity(teacher)
    document_service.add_document(opp["id"], "Application Pack", "a.pdf", b"a", "application/pdf", teacher["id"])
    document_service.add_document(opp["id"], "Consent FORM", "b.pdf", b"b", "application/pdf", teacher["id"])
    document_service.add_document(opp["id"], "Brochure", "c.pdf", b"c", "application/pdf", teacher["id"])

    names = [d["name"] for d in document_service.get_form_documents(opp["id"])]

    assert names == ["Application Pack", "Consent FORM"]


def test_delete_document(client, make_opportunity, teacher, student, auth_headers, file_storage):
    opp = make_opportunity(teacher)
    document = upload(client, auth_headers(teacher), opp["id"]).json()

    assert client.delete(f"/api/documents/{document['id']}", headers=auth_headers(student)).status_code == 403
    assert client.delete(f"/api/documents/{document['id']}", headers=auth_headers(teacher)).status_code == 200
    assert client.delete(f"/api/documents/{document['id']}", headers=auth_headers(teacher)).status_code == 404
    assert document_service.get_document_by_id(document["id"]) is None


def test_supported_formats(client):
    body = client.get("/api/documents/formats").json()

    assert body["max_size_mb"] == 50
    assert {"mime_type": "application/pdf", "name": "PDF"} in body["supported_formats"]
