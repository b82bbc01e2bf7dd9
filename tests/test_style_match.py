from thrifthub.helpers.ai.similarity import fit_dimensions, serialize_embedding
from thrifthub.models.product.product_embedding import ProductEmbedding


def index(factory, product, vector):
    factory.session.add(ProductEmbedding(product_id=product.id, embedding=serialize_embedding(fit_dimensions(vector))))
    factory.session.commit()


def test_style_match_by_url_ranks_by_similarity(client, factory, embedding_api):
    close = factory.create_product(title="Blue denim jacket")
    closer = factory.create_product(title="Denim jacket")
    far = factory.create_product(title="Red heels")
    hidden = factory.create_product(title="Sold out", is_active=False)
    index(factory, close, [0.8, 0.6, 0.0])
    index(factory, closer, [1.0, 0.15, 0.0])
    index(factory, far, [0.0, 0.0, 1.0])
    index(factory, hidden, [1.0, 0.0, 0.0])
    embedding_api.vector = [1.0, 0.0, 0.0]

    response = client.post("/ai/style-match", json={"image_url": "https://cdn.thrifthub.test/query.jpg"})

    assert response.status_code == 200
    results = response.json()["data"]
    assert [r["product"]["title"] for r in results] == ["Denim jacket", "Blue denim jacket", "Red heels"]
    assert results[0]["match_label"] == "99% match"
    assert results[2]["similarity_score"] == 0.0
    assert embedding_api.inputs == ["image:https://cdn.thrifthub.test/query.jpg"]


def test_style_match_upload_is_removed_after_use(client, factory, s3, embedding_api):
    index(factory, factory.create_product(), [1.0])

    response = client.post("/ai/style-match", files={"image": ("look.jpg", b"\xff\xd8 fake jpeg", "image/jpeg")})

    assert response.status_code == 200
    assert len(response.json()["data"]) == 1
    assert embedding_api.inputs[0].startswith("image:https://cdn.thrifthub.test/style-match/")
    assert s3.objects == {}
    assert len(s3.deleted) == 1


def test_style_match_requires_an_image(client):
    response = client.post("/ai/style-match", json={})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_style_match_embedding_failure(client, embedding_api):
    embedding_api.fail = True

    response = client.post("/ai/style-match", json={"image_url": "https://cdn.thrifthub.test/q.jpg"})

    assert response.status_code == 502
    assert response.json()["error"] == {"code": "GATEWAY_ERROR", "message": "Failed to generate image embedding"}
