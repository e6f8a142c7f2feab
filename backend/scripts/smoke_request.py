"""Run a quick story/task round trip against the app.

Builds the application on a throwaway SQLite database and drives it
through FastAPI's TestClient, printing each response.
"""

import os
import sys
import tempfile

# Ensure backend folder is on sys.path so `gsd` package can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import create_engine  # noqa: E402

from gsd.config import settings  # noqa: E402
from gsd.main import create_app  # noqa: E402


def show(label, resp):
    print(f'{label}: {resp.status_code}')
    if resp.content:
        print('  JSON:', resp.json())


def run(base: str):
    with tempfile.TemporaryDirectory() as tmp:
        engine = create_engine(f"sqlite:///{tmp}/smoke.db", connect_args={"check_same_thread": False})
        client = TestClient(create_app(engine=engine))
        show('health', client.get('/health'))
        story = client.post(f'{base}/stories', json={'name': 'Books To Read', 'owner': 'alice'})
        show('create story', story)
        story_id = story.json()['id']
        task = client.post(f'{base}/tasks', json={'story_id': story_id, 'name': 'Read Suttree'})
        show('create task', task)
        task_id = task.json()['id']
        show('complete task', client.patch(f'{base}/tasks/{task_id}', json={'status': 'complete'}))
        show('list tasks', client.get(f'{base}/stories/{story_id}/tasks'))
        show('delete story', client.delete(f'{base}/stories/{story_id}'))
        show('get task', client.get(f'{base}/tasks/{task_id}'))
        engine.dispose()


if __name__ == '__main__':
    run(settings.API_URL_BASE)
