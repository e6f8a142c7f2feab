import uuid

from gsd import errors, services


def test_health_and_request_id(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers
    echoed = client.get('/health', headers={'X-Request-ID': 'abc123'})
    assert echoed.headers['X-Request-ID'] == 'abc123'


def test_story_and_task_scenario(client, api):
    r = client.post(api('/stories'), json={'name': ' Books To Read ', 'owner': 'alice'})
    assert r.status_code == 201
    story = r.json()
    assert story['name'] == 'Books To Read'
    assert story['owner'] == 'alice'
    story_id = story['id']
    assert uuid.UUID(story_id)

    r = client.post(api('/tasks'), json={'story_id': story_id, 'name': 'Read Suttree'})
    assert r.status_code == 201
    task = r.json()
    assert task['status'] == 'incomplete'
    assert task['story_id'] == story_id

    r = client.patch(api(f"/tasks/{task['id']}"), json={'status': 'complete'})
    assert r.status_code == 200
    assert r.json()['status'] == 'complete'
    assert r.json()['name'] == 'Read Suttree'

    r = client.delete(api(f'/stories/{story_id}'))
    assert r.status_code == 204

    assert client.get(api(f'/stories/{story_id}')).status_code == 404
    r = client.get(api(f'/stories/{story_id}/tasks'))
    assert r.status_code == 200
    assert r.json() == []
    r = client.get(api(f"/tasks/{task['id']}"))
    assert r.status_code == 404
    assert r.json() == {'error': 'not_found', 'message': f"task not found: {task['id']}"}


def test_list_stories_defaults_to_backlog(client, api):
    client.post(api('/stories'), json={'name': 'Someday'})
    client.post(api('/stories'), json={'name': 'Mine', 'owner': 'alice'})
    r = client.get(api('/stories'))
    assert r.status_code == 200
    assert [s['name'] for s in r.json()] == ['Someday']
    r = client.get(api('/stories'), params={'owner': 'alice'})
    assert [s['name'] for s in r.json()] == ['Mine']


def test_blank_story_name_is_bad_request(client, api):
    r = client.post(api('/stories'), json={'name': '   ', 'owner': 'alice'})
    assert r.status_code == 400
    assert r.json() == {'error': 'invalid_argument', 'message': 'string is empty'}
    assert client.get(api('/stories'), params={'owner': 'alice'}).json() == []


def test_malformed_requests_are_bad_request(client, api):
    assert client.get(api('/stories/not-a-uuid')).status_code == 400
    r = client.post(api('/stories'), json={'owner': 'alice'})
    assert r.status_code == 400
    assert r.json()['error'] == 'invalid_argument'
    r = client.post(api('/tasks'), json={'story_id': 'nope', 'name': 'x'})
    assert r.status_code == 400


def test_task_for_missing_story_is_not_found(client, api):
    r = client.post(api('/tasks'), json={'story_id': str(uuid.uuid4()), 'name': 'Read Suttree'})
    assert r.status_code == 404
    assert r.json()['message'].startswith('story not found')


def test_unknown_status_keeps_task(client, api):
    story = client.post(api('/stories'), json={'name': 'Books To Read', 'owner': 'alice'}).json()
    task = client.post(api('/tasks'), json={'story_id': story['id'], 'name': 'Read Suttree'}).json()
    r = client.patch(api(f"/tasks/{task['id']}"), json={'status': 'done'})
    assert r.status_code == 400
    assert r.json()['error'] == 'invalid_argument'
    assert client.get(api(f"/tasks/{task['id']}")).json() == task


def test_patch_story(client, api):
    story = client.post(api('/stories'), json={'name': 'Books To Read', 'owner': 'alice'}).json()
    r = client.patch(api(f"/stories/{story['id']}"), json={'owner': 'bob'})
    assert r.status_code == 200
    assert r.json() == {'id': story['id'], 'name': 'Books To Read', 'owner': 'bob'}
    r = client.patch(api(f'/stories/{uuid.uuid4()}'), json={'name': 'x'})
    assert r.status_code == 404


def test_delete_missing_entities_is_not_found(client, api):
    story = client.post(api('/stories'), json={'name': 'Books To Read', 'owner': 'alice'}).json()
    task = client.post(api('/tasks'), json={'story_id': story['id'], 'name': 'Read Suttree'}).json()
    assert client.delete(api(f"/tasks/{task['id']}")).status_code == 204
    assert client.delete(api(f"/tasks/{task['id']}")).status_code == 404
    assert client.delete(api(f"/stories/{story['id']}")).status_code == 204
    assert client.delete(api(f"/stories/{story['id']}")).status_code == 404


def test_internal_errors_are_genericized(client, api, monkeypatch):
    def boom(self, owner=None):
        raise errors.InternalError("list_stories failed: password authentication failed for user gsd")

    monkeypatch.setattr(services.StoryService, "list_for_owner", boom)
    r = client.get(api('/stories'))
    assert r.status_code == 500
    assert r.json() == {'error': 'internal', 'message': 'internal error'}
