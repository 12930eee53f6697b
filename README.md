# orcid-works

Fetch all work details recorded for an ORCID iD through the read-public
endpoints of the ORCID API v3.0, and save them to a single JSON file.

No authentication token is needed: only public data is read.

## Command line

```
orcid-works-cli --id 0000-0000-0000-0000 --out ./works/output.json
```

What happens:

1. The User-Agent in use is printed. It names the tool and its version, and
   carries the `--user-agent-note` text when that is not blank.
2. The list of work summaries for the iD is fetched (`/v3.0/{id}/works`).
3. The detail of every work (`/v3.0/{id}/work/{put-code}`) is fetched in
   parallel, with at most `--concurrency` requests in flight and no more
   than `--rate-limit` requests started per second (a burst of that many is
   allowed at the start).
4. The details are sorted by put-code and written as pretty-printed
   `{"records": [ ... ]}`. If the file already exists and holds the same
   records, compared by put-code so order is ignored, it is left untouched
   and "no changes" is printed. Otherwise missing parent directories are
   created, the JSON is written to a file with the suffix `.tmp` next to the
   target and then renamed into place.

Options:

| Option | Default | Meaning |
| --- | --- | --- |
| `-i`, `--id` | required | ORCID iD (`xxxx-xxxx-xxxx-xxxx`) |
| `-o`, `--out` | `./output.json` | Output path of the JSON file |
| `--concurrency` | `10` | Maximum parallel requests (at least 1) |
| `--rate-limit` | `12` | Requests per second, from 1 to 40 |
| `--user-agent-note` | none | Extra text appended to the built-in User-Agent |
| `-V`, `--version` | | Print the version and exit |

Show all options with:

```
orcid-works-cli --help
```

If a request fails, the API answers with a non-success status, a response
does not match the model, or the file cannot be written, the error is
printed to standard error and the command exits with status 1.

This is a third-party tool and is not endorsed by ORCID.

## Library use

`orcid_works.model` holds dataclasses for the API's JSON objects
(`OrcidWorks`, `WorkGroup`, `OrcidWorkSummary`, `OrcidWorkDetail`, and their
parts), plus `OrcidWorkDetailFile` for the on-disk file. Each has
`from_dict` and `to_dict`, which keep the exact ORCID field names and leave
out optional fields that are absent; `OrcidWorks`, `OrcidWorkDetail` and
`OrcidWorkDetailFile` also have `from_reader`, which reads JSON from a file
object.

```python
from orcid_works.model import OrcidWorkDetailFile

with open("output.json", encoding="utf-8") as fh:
    detail_file = OrcidWorkDetailFile.from_reader(fh)

by_putcode = detail_file.into_map()   # {put_code: OrcidWorkDetail}, ordered by put-code
```

Data that does not fit the model raises `orcid_works.model.ModelError`,
whose `path` attribute tells where, e.g. `group[0].work-summary[1].put-code`.

The API helpers in `orcid_works.api` are coroutines taking an
`httpx.AsyncClient`:

```python
import asyncio
import httpx

from orcid_works.api import fetch_works, fetch_work_detail

async def demo():
    async with httpx.AsyncClient() as client:
        works = await fetch_works(client, "0000-0000-0000-0000")
        for group in works.group:
            for summary in group.work_summary:
                detail = await fetch_work_detail(client, "0000-0000-0000-0000", summary.put_code)
                print(detail.summary.title.title.value)

asyncio.run(demo())
```

A failed request or a non-success HTTP status raises
`orcid_works.api.OrcidApiError`. A response body that does not match the
model raises `ModelError`, after a line giving the location of the problem
is printed to standard error.

`orcid_works.compare.detail_changed(path, newest)` tells whether the file at
`path` is missing or holds records other than those of `newest`.
`orcid_works.cli` also exposes the pieces the command is built from:
`RateLimiter`, `build_user_agent`, `build_parser`, `write_if_changed`,
`fetch_all_details` and `run`.