# itemserver

itemserver is a small JSON HTTP server built on Starlette and served by
uvicorn. It keeps items in memory and puts a REST interface in front of them.
It also answers CORS requests and logs every request it handles.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Running

```
itemserver
```

The server listens on `0.0.0.0`, on port `3000` unless told otherwise. It
takes no command-line options besides `--help`; these environment variables
change how it runs:

- `PORT`: the port to listen on, `0` to `65535`. The default is `3000`. Any
  other value stops the command with an error.
- `APP_ENV`: the environment name written to the startup log. The default is
  `development`.
- `LOG_LEVEL`: `trace`, `debug`, `info`, `warn`, `warning` or `error`. The
  default is `info`.
- `LOG_FORMAT`: set it to `json` to get one JSON object per log line instead of
  plain text.

Stop the server with Ctrl+C or SIGTERM. It shuts down gracefully.

## Endpoints

| Method | Path              | Purpose                                          |
|--------|-------------------|--------------------------------------------------|
| GET    | `/`               | Application name, version and endpoint list      |
| GET    | `/health`         | Health status, Unix timestamp, store statistics  |
| GET    | `/api/stats`      | Total items, number of unique tags, the tags     |
| GET    | `/api/items`      | List items in id order; takes `limit`, `offset`  |
| POST   | `/api/items`      | Create an item from JSON; answers `201`          |
| GET    | `/api/items/{id}` | Read one item                                    |
| PUT    | `/api/items/{id}` | Replace an item's name, description, tags, metadata |
| PATCH  | `/api/items/{id}` | Change only the fields given                     |
| DELETE | `/api/items/{id}` | Remove an item; answers `204` with no body       |
| POST   | `/api/form`       | Create an item from a URL-encoded form           |
| HEAD   | `/api/head`       | Item count and API version, as headers           |
| OPTIONS| `/api/options`    | The methods the API accepts                      |

A new store holds two sample items with ids `1` and `2`; new items get ids
from `3` upward. An item's name must not be blank and, on creation, must be at
most 100 bytes long. Id `0` is rejected as invalid.

A successful response looks like this:

```json
{"success": true, "data": {...}, "message": null}
```

A failed request gets a response like this:

```json
{"error": "Item with id 42 not found", "status": 404}
```

A body or query string that cannot be decoded (for instance a wrong
`Content-Type`, broken JSON, a missing `name`, or a non-numeric id) is
answered with a plain-text message and status `400`, `415` or `422`.

## Example

```
curl -X POST localhost:3000/api/items \
     -H 'content-type: application/json' \
     -d '{"name": "Widget", "tags": ["tools"]}'

curl -X PATCH localhost:3000/api/items/3 \
     -H 'content-type: application/json' \
     -d '{"description": null}'

curl -X POST localhost:3000/api/form \
     -d 'name=Alice&email=alice@example.com&message=hello'
```

## Using it as a library

```python
import asyncio

from itemserver.app import AppState, create_app, run_server

app = create_app(AppState())
asyncio.run(run_server(app, "127.0.0.1", 8000))
```

- `itemserver.store.DataStore` is a thread-safe in-memory item store that can
  be used on its own. It raises `itemserver.errors.NotFoundError` for unknown
  ids.
- `itemserver.cors` offers `cors_layer()` (local development origins),
  `cors_layer_permissive()` and `cors_layer_production(allowed_origins)`, each
  a Starlette `Middleware`.
- `itemserver.request_logging.RequestLoggingMiddleware` logs method, URI,
  HTTP version, status and latency of each request.

## Limitations

Items live only in memory: nothing is written to disk, and everything apart
from the two sample items is lost when the server stops. There is no
authentication.