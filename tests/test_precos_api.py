import pytest


def _create(client, headers, **fields):
    payload = {'marca': 'ACME', 'codigo': 'A-1', 'preco': 10, 'descricao': 'parafuso'}
    payload.update(fields)
    response = client.post('/api/precos', json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_requires_session(client):
    assert client.get('/api/precos').status_code == 401
    assert client.get('/api/marcas').status_code == 401


def test_create_uppercases_description(client, auth_headers):
    preco = _create(client, auth_headers, descricao='  parafuso sextavado  ', preco='12,50')
    assert preco['descricao'] == 'PARAFUSO SEXTAVADO'
    assert preco['preco'] == 12.5
    assert preco['marca'] == 'ACME'
    assert preco['timestamp'] is not None


@pytest.mark.parametrize('missing', ['marca', 'codigo', 'preco', 'descricao'])
def test_create_requires_every_field(client, auth_headers, missing):
    payload = {'marca': 'ACME', 'codigo': 'A-1', 'preco': 10, 'descricao': 'x'}
    payload[missing] = ''
    response = client.post('/api/precos', json=payload, headers=auth_headers)
    assert response.status_code == 400
    assert missing in response.get_json()['error']


def test_create_rejects_negative_price(client, auth_headers):
    payload = {'marca': 'ACME', 'codigo': 'A-1', 'preco': -1, 'descricao': 'x'}
    assert client.post('/api/precos', json=payload, headers=auth_headers).status_code == 400


def test_update_get_and_delete(client, auth_headers):
    preco = _create(client, auth_headers)

    response = client.put(f"/api/precos/{preco['id']}",
                          json={'marca': 'ACME', 'codigo': 'A-2', 'preco': 11, 'descricao': 'porca'},
                          headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()['codigo'] == 'A-2'
    assert client.get(f"/api/precos/{preco['id']}", headers=auth_headers).get_json()['descricao'] == 'PORCA'

    response = client.delete(f"/api/precos/{preco['id']}", headers=auth_headers)
    assert response.get_json() == {'message': 'Preço excluído com sucesso'}
    assert client.get(f"/api/precos/{preco['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/precos/{preco['id']}", headers=auth_headers).status_code == 404


def test_update_unknown_id(client, auth_headers):
    response = client.put('/api/precos/999', json={'marca': 'A', 'codigo': 'B', 'preco': 1, 'descricao': 'C'},
                          headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Preço não encontrado'}


def test_duplicate_codes_are_accepted_by_the_server(client, auth_headers):
    _create(client, auth_headers)
    _create(client, auth_headers)
    assert client.get('/api/precos', headers=auth_headers).get_json()['total'] == 2


def test_pagination(client, auth_headers):
    for i in range(5):
        _create(client, auth_headers, codigo=f"C{i}")

    page = client.get('/api/precos?page=2&limit=2', headers=auth_headers).get_json()
    assert page['total'] == 5
    assert page['page'] == 2
    assert page['totalPages'] == 3
    assert [p['codigo'] for p in page['data']] == ['C2', 'C3']

    last = client.get('/api/precos?page=3&limit=2', headers=auth_headers).get_json()
    assert [p['codigo'] for p in last['data']] == ['C4']


def test_empty_table_has_zero_pages(client, auth_headers):
    page = client.get('/api/precos', headers=auth_headers).get_json()
    assert page == {'data': [], 'total': 0, 'page': 1, 'totalPages': 0}


@pytest.mark.parametrize('query', ['page=0', 'limit=0', 'page=abc', 'limit=-3'])
def test_invalid_paging_parameters(client, auth_headers, query):
    assert client.get(f"/api/precos?{query}", headers=auth_headers).status_code == 400


def test_brand_and_search_filters(client, auth_headers):
    _create(client, auth_headers, marca='ACME', codigo='X1', descricao='Parafuso')
    _create(client, auth_headers, marca='ACME', codigo='X2', descricao='Arruela')
    _create(client, auth_headers, marca='BOSCH', codigo='B1', descricao='Furadeira')

    acme = client.get('/api/precos?marca=ACME', headers=auth_headers).get_json()
    assert acme['total'] == 2

    todas = client.get('/api/precos?marca=TODAS', headers=auth_headers).get_json()
    assert todas['total'] == 3

    busca = client.get('/api/precos?search=parafuso', headers=auth_headers).get_json()
    assert [p['codigo'] for p in busca['data']] == ['X1']

    por_marca = client.get('/api/precos?search=bos', headers=auth_headers).get_json()
    assert [p['codigo'] for p in por_marca['data']] == ['B1']

    combinado = client.get('/api/precos?marca=BOSCH&search=arruela', headers=auth_headers).get_json()
    assert combinado['total'] == 0


def test_results_are_ordered_by_brand_then_code(client, auth_headers):
    _create(client, auth_headers, marca='ZETA', codigo='A')
    _create(client, auth_headers, marca='ACME', codigo='B')
    _create(client, auth_headers, marca='ACME', codigo='A')
    data = client.get('/api/precos', headers=auth_headers).get_json()['data']
    assert [(p['marca'], p['codigo']) for p in data] == [('ACME', 'A'), ('ACME', 'B'), ('ZETA', 'A')]


def test_brand_list_refreshes_after_writes(client, auth_headers):
    assert client.get('/api/marcas', headers=auth_headers).get_json() == []

    preco = _create(client, auth_headers, marca='BOSCH')
    _create(client, auth_headers, marca='ACME')
    assert client.get('/api/marcas', headers=auth_headers).get_json() == ['ACME', 'BOSCH']

    client.delete(f"/api/precos/{preco['id']}", headers=auth_headers)
    assert client.get('/api/marcas', headers=auth_headers).get_json() == ['ACME']


def test_brand_list_is_served_from_cache(app, client, auth_headers, monkeypatch):
    _create(client, auth_headers, marca='ACME')
    assert client.get('/api/marcas', headers=auth_headers).get_json() == ['ACME']

    repository = app.config['preco_service'].preco_repository

    def _fail(db):
        raise AssertionError("marcas deveriam vir do cache")

    monkeypatch.setattr(repository, 'distinct_marcas', _fail)
    assert client.get('/api/marcas', headers=auth_headers).get_json() == ['ACME']
