"""
Integration tests for the page endpoints.
"""
import pytest

BASE = "/api/v1/pages"


@pytest.mark.integration
class TestCreatePage:

    def test_create_draft(self, test_client, organization):
        response = test_client.post(BASE, json={"title": "Quiénes Somos", "organization_id": organization.id})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "quienes-somos"
        assert data["is_draft"] is True
        assert data["published_at"] is None
        assert data["sort_order"] == 1
        assert data["template_label"] == "Default"
        assert data["cache_duration"] == 60
        assert data["can_be_published"] is False

    def test_create_published_stamps_date(self, test_client, organization):
        response = test_client.post(
            BASE, json={"title": "Inicio", "organization_id": organization.id, "is_draft": False}
        )
        assert response.json()["data"]["published_at"] is not None

    def test_organization_is_required(self, test_client):
        response = test_client.post(BASE, json={"title": "Sin organización"})
        assert response.status_code == 422
        assert "organization_id" in response.json()["errors"]

    def test_unknown_organization(self, test_client):
        response = test_client.post(BASE, json={"title": "Fantasma", "organization_id": 999})
        assert response.status_code == 422
        assert "organization_id" in response.json()["errors"]

    def test_invalid_template(self, test_client, organization):
        response = test_client.post(
            BASE, json={"title": "Raro", "organization_id": organization.id, "template": "wide"}
        )
        assert response.status_code == 422
        assert "template" in response.json()["errors"]

    def test_contact_template_needs_contact_info(self, test_client, organization):
        response = test_client.post(
            BASE, json={"title": "Contacto", "organization_id": organization.id, "template": "contact"}
        )
        assert response.status_code == 422
        assert "meta_data.contact_info" in response.json()["errors"]

        response = test_client.post(BASE, json={
            "title": "Contacto",
            "organization_id": organization.id,
            "template": "contact",
            "meta_data": {"contact_info": {"email": "hola@coop.example"}},
        })
        assert response.status_code == 201

    @pytest.mark.parametrize("template, minutes", [("landing", 30), ("article_list", 15), ("minimal", 60)])
    def test_cache_duration_follows_template(self, test_client, organization, template, minutes):
        response = test_client.post(
            BASE, json={"title": f"Plantilla {template}", "organization_id": organization.id, "template": template}
        )
        assert response.json()["data"]["cache_duration"] == minutes

    def test_duplicate_slug(self, test_client, seed, organization):
        seed.page(title="Servicios", organization_id=organization.id)
        response = test_client.post(BASE, json={"title": "Servicios", "organization_id": organization.id})

        assert response.status_code == 422
        assert "slug" in response.json()["errors"]

    def test_route_is_normalized(self, test_client, organization):
        response = test_client.post(
            BASE, json={"title": "Contacto", "organization_id": organization.id, "route": "contacto"}
        )
        assert response.json()["data"]["route"] == "/contacto"

    def test_parent_from_other_organization(self, test_client, seed):
        foreign = seed.page(title="Foreign", organization_id=seed.organization().id)
        local_org = seed.organization()

        response = test_client.post(
            BASE, json={"title": "Local", "organization_id": local_org.id, "parent_id": foreign.id}
        )
        assert response.status_code == 422
        assert "parent_id" in response.json()["errors"]


@pytest.mark.integration
class TestReadPages:

    def test_list_only_published(self, test_client, seed, organization):
        seed.page(title="Publicada", organization_id=organization.id)
        seed.page(title="Borrador", organization_id=organization.id, is_draft=True)

        titles = [page["title"] for page in test_client.get(BASE).json()["data"]]
        assert titles == ["Publicada"]

    def test_show_by_id_slug_and_route(self, test_client, seed, organization):
        page = seed.page(title="Nosotros", organization_id=organization.id, route="/sobre-nosotros")

        for key in (str(page.id), "nosotros", "sobre-nosotros"):
            response = test_client.get(f"{BASE}/{key}")
            assert response.status_code == 200
            assert response.json()["data"]["id"] == page.id

    def test_draft_is_not_found(self, test_client, seed, organization):
        draft = seed.page(title="Borrador", organization_id=organization.id, is_draft=True)
        response = test_client.get(f"{BASE}/{draft.id}")

        assert response.status_code == 404
        assert response.json()["message"] == "Page not found"

    def test_show_with_components(self, test_client, seed, organization):
        page = seed.page(title="Inicio", organization_id=organization.id)
        seed.component(page_id=page.id)

        data = test_client.get(f"{BASE}/{page.id}", params={"include_components": True}).json()["data"]

        assert len(data["components"]) == 1
        assert data["components"][0]["component_type_name"] == "Hero Banner"
        assert data["can_be_published"] is True

    def test_by_route(self, test_client, seed, organization):
        page = seed.page(title="Contacto", organization_id=organization.id, route="/contact",
                         template="contact", meta_data={"contact_info": {"phone": "555"}})

        response = test_client.get(f"{BASE}/by-route/contact")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == page.id

        assert test_client.get(f"{BASE}/by-route/missing").status_code == 404

    def test_home_page_flag(self, test_client, seed, organization):
        home = seed.page(title="Home", organization_id=organization.id)
        other = seed.page(title="Blog", organization_id=organization.id, route="/blog")

        assert test_client.get(f"{BASE}/{home.id}").json()["data"]["is_home_page"] is True
        assert test_client.get(f"{BASE}/{other.id}").json()["data"]["is_home_page"] is False

    def test_hierarchy_and_breadcrumb(self, test_client, seed, organization):
        root = seed.page(title="Servicios", organization_id=organization.id)
        child = seed.page(title="Instalación", organization_id=organization.id, parent_id=root.id)
        seed.page(title="Oculta", organization_id=organization.id, parent_id=root.id, is_draft=True)

        tree = test_client.get(f"{BASE}/hierarchy").json()["data"]
        assert [node["title"] for node in tree] == ["Servicios"]
        assert [node["title"] for node in tree[0]["children"]] == ["Instalación"]

        data = test_client.get(f"{BASE}/{child.id}").json()["data"]
        assert data["depth"] == 1
        assert data["full_slug"] == "servicios/instalacion"
        assert [crumb["title"] for crumb in data["breadcrumb"]] == ["Servicios", "Instalación"]


@pytest.mark.integration
class TestSearchPages:

    def test_search_title_and_keywords(self, test_client, seed, organization):
        seed.page(title="Energía solar", organization_id=organization.id)
        seed.page(title="Contacto", organization_id=organization.id, search_keywords="solar, placas")
        seed.page(title="Solar borrador", organization_id=organization.id, is_draft=True)

        body = test_client.get(f"{BASE}/search", params={"q": "solar"}).json()

        assert body["query"] == "solar"
        assert body["total"] == 2
        assert {page["title"] for page in body["data"]} == {"Energía solar", "Contacto"}

    @pytest.mark.parametrize("query", ["", "ab", "  a  "])
    def test_query_too_short(self, test_client, query):
        response = test_client.get(f"{BASE}/search", params={"q": query})
        assert response.status_code == 422
        assert "q" in response.json()["errors"]


@pytest.mark.integration
class TestUpdatePage:

    def test_title_regenerates_slug(self, test_client, seed, organization):
        page = seed.page(title="Antiguo", organization_id=organization.id)
        data = test_client.put(f"{BASE}/{page.id}", json={"title": "Nuevo Título"}).json()["data"]
        assert data["slug"] == "nuevo-titulo"

    def test_explicit_slug_wins(self, test_client, seed, organization):
        page = seed.page(title="Antiguo", organization_id=organization.id)
        data = test_client.put(f"{BASE}/{page.id}", json={"title": "Nuevo", "slug": "propio"}).json()["data"]
        assert data["slug"] == "propio"

    def test_publishing_without_title_reports_both_fields(self, test_client, seed, organization):
        page = seed.page(title="Borrador", organization_id=organization.id, is_draft=True)
        response = test_client.put(f"{BASE}/{page.id}", json={"title": "", "is_draft": False})

        assert response.status_code == 422
        errors = response.json()["errors"]
        assert "title" in errors
        assert "slug" in errors

    def test_publishing_stamps_date(self, test_client, seed, organization):
        page = seed.page(title="Borrador", organization_id=organization.id, is_draft=True)
        data = test_client.put(f"{BASE}/{page.id}", json={"is_draft": False}).json()["data"]

        assert data["is_draft"] is False
        assert data["published_at"] is not None

    def test_template_change_updates_cache_duration(self, test_client, seed, organization):
        page = seed.page(title="Portada", organization_id=organization.id)
        data = test_client.put(f"{BASE}/{page.id}", json={"template": "landing"}).json()["data"]
        assert data["cache_duration"] == 30

    def test_language_change_carries_components(self, test_client, seed, organization):
        page = seed.page(title="Inicio", organization_id=organization.id)
        component = seed.component(page_id=page.id, is_draft=False)
        test_client.get(f"/api/v1/page-components/for-page/{page.id}", params={"language": "en"})

        response = test_client.put(f"{BASE}/{page.id}", json={"language": "en"})
        assert response.status_code == 200

        listing = test_client.get(f"/api/v1/page-components/for-page/{page.id}", params={"language": "en"}).json()
        assert listing["total"] == 1

        shown = test_client.get(f"/api/v1/page-components/{component.id}").json()["data"]
        assert shown["language"] == "en"

        renamed = test_client.put(f"/api/v1/page-components/{component.id}", json={"language": "en"})
        assert renamed.status_code == 200

    def test_circular_parent(self, test_client, seed, organization):
        root = seed.page(title="Raíz", organization_id=organization.id)
        child = seed.page(title="Hija", organization_id=organization.id, parent_id=root.id)

        response = test_client.put(f"{BASE}/{root.id}", json={"parent_id": child.id})
        assert response.status_code == 422
        assert "parent_id" in response.json()["errors"]


@pytest.mark.integration
class TestDeleteReorderDuplicate:

    def test_delete_with_children_is_refused(self, test_client, seed, organization):
        root = seed.page(title="Raíz", organization_id=organization.id)
        seed.page(title="Hija", organization_id=organization.id, parent_id=root.id)

        response = test_client.delete(f"{BASE}/{root.id}")
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot delete a page that has child pages"

    def test_delete_with_components_is_refused(self, test_client, seed, organization):
        page = seed.page(title="Inicio", organization_id=organization.id)
        component = seed.component(page_id=page.id, is_draft=False)

        response = test_client.delete(f"{BASE}/{page.id}")
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot delete a page that has associated content"

        listed = test_client.get("/api/v1/page-components", params={"page_id": page.id}).json()["data"]
        assert [c["id"] for c in listed] == [component.id]
        assert listed[0]["page"]["id"] == page.id

    def test_delete(self, test_client, seed, organization):
        page = seed.page(title="Temporal", organization_id=organization.id)
        assert test_client.delete(f"{BASE}/{page.id}").status_code == 200
        assert test_client.get(f"{BASE}/{page.id}").status_code == 404

    def test_reorder(self, test_client, seed, organization):
        for title in ("Uno", "Dos", "Tres"):
            seed.page(title=title, organization_id=organization.id)
        last = test_client.get(BASE).json()["data"][-1]

        response = test_client.post(f"{BASE}/{last['id']}/reorder", json={"position": 1})
        assert response.json()["data"]["sort_order"] == 1

        titles = [page["title"] for page in test_client.get(BASE).json()["data"]]
        assert titles == ["Tres", "Uno", "Dos"]

    def test_duplicate_is_an_unpublished_copy(self, test_client, seed, organization):
        source = seed.page(title="Servicios", organization_id=organization.id, route="/servicios")

        response = test_client.post(f"{BASE}/{source.id}/duplicate")
        assert response.status_code == 201
        copy = response.json()["data"]

        assert copy["title"] == "Servicios (Copy)"
        assert copy["slug"] == "servicios-copy"
        assert copy["route"] is None
        assert copy["is_draft"] is True
        assert copy["published_at"] is None
        assert copy["sort_order"] == 2

    def test_second_duplicate_gets_numbered_slug(self, test_client, seed, organization):
        source = seed.page(title="Servicios", organization_id=organization.id)
        test_client.post(f"{BASE}/{source.id}/duplicate")
        copy = test_client.post(f"{BASE}/{source.id}/duplicate").json()["data"]
        assert copy["slug"] == "servicios-copy-2"
