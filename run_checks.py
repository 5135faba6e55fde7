import os

os.environ.setdefault("USE_MOCK_DB", "true")
os.environ.setdefault("ENRICHMENT_BATCH_DELAY_SECONDS", "0")

from fastapi.testclient import TestClient
from cityfix.main import app

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nSTORE HEALTH:')
try:
    resp = client.get('/health/store')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('Store call raised exception:', e)

print('\nANALYTICS:')
print(client.get('/admin/analytics').json())

print('\nDEPARTMENTS:')
for group in client.get('/admin/departments').json():
    print(f"  {group['department']}: {group['count']}")
