from conftest import NAMESPACE


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_stats_reflect_pairing_state(client, sio_client):
    assert client.get('/stats').get_json() == {
        'connections': 0, 'waiting': 0, 'pairs': 0, 'grace_periods': 0
    }
    first = sio_client()
    first.send({'type': 'join'}, namespace=NAMESPACE)
    stats = client.get('/stats').get_json()
    assert stats['connections'] == 1
    assert stats['waiting'] == 1

    second = sio_client()
    second.send({'type': 'join'}, namespace=NAMESPACE)
    stats = client.get('/stats').get_json()
    assert stats == {'connections': 2, 'waiting': 0, 'pairs': 1, 'grace_periods': 0}
