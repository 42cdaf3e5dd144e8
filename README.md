# lookout

Building blocks for an assisted code review service. Analyzers look at
source code changes and answer with text comments, optionally tied to a
file and a line. This package provides the pieces around that exchange:

- plain data types for references, revisions, files, changes, comments,
  requests and analyzer responses (`lookout.types`);
- analyzer configuration and grouping, filtering and de-duplication of
  analyzer comments (`lookout.analysis`);
- push and review events (`lookout.event`);
- analysis statuses and the abstract `Poster` used to publish results
  (`lookout.poster`);
- scanners that stream changes and files, filtering wrappers, a client
  over a pluggable transport and a request handler that honours
  cancellation (`lookout.data`);
- a small example analyzer (`lookout.dummy`);
- helpers for running analyzers against a local repository
  (`lookout.sdk`);
- loading and validating the YAML configuration of the service and of its
  web front end (`lookout.config`).

## Comments and groups

Each analyzer produces a list of `Comment` objects. They are kept together
with the analyzer's `AnalyzerConfig` in `AnalyzerComments`, and a sequence
of those forms an `AnalyzerCommentsGroups`:

```python
from lookout.analysis import AnalyzerComments, AnalyzerCommentsGroups, AnalyzerConfig
from lookout.types import Comment

groups = AnalyzerCommentsGroups([
    AnalyzerComments(
        config=AnalyzerConfig(name="style"),
        comments=[
            Comment(file="main.go", line=3, text="This line exceeded 120 chars."),
            Comment(file="main.go", line=3, text="This line exceeded 120 chars."),
        ],
    ),
])

groups.count()            # 2
unique = groups.dedup()   # duplicates on (file, line, text) dropped per analyzer
unique.count()            # 1

# skip comments on other files; groups left empty disappear
kept = groups.filter(lambda c: c.file != "main.go")
```

`filter` takes a function that returns `True` for comments to skip; if the
function raises, the exception propagates. `dedup` logs a warning through
the `logging` module for every analyzer that produced duplicates.

## Events

`PushEvent` and `ReviewEvent` are dataclasses carrying a `CommitRevision`
(base and head `ReferencePointer`s), the provider name, an organization id
and the analyzer configuration. `type()` returns an `EventType` and
`revision()` the commit revision.

## Analysis status

`AnalysisStatus` names the state reported while an analysis runs:

```python
from lookout.poster import AnalysisStatus

str(AnalysisStatus.PENDING)   # "pending"
str(AnalysisStatus(100))      # "unknown"
```

Subclass `Poster` and implement `post(event, comments, safe)` and
`status(event, status)` to publish results wherever they belong.

## Streaming changes and files

`ChangeScanner` and `FileScanner` are iterators that can be closed, and
work as context managers. `DataServerHandler` takes a `ChangeGetter` and a
`FileGetter` and sends each item they yield to a stream object with a
`send` method and a `context` attribute; before each item it checks the
`CallContext` and raises `RequestCanceledError` if it was cancelled.

`DataClient` wraps any transport object whose `get_changes` and
`get_files` return iterables, and hands back `ClientChangeScanner` and
`ClientFileScanner`. `FnChangeScanner` and `FnFileScanner` wrap another
scanner, skip items for which a predicate returns `True`, and can run an
`on_start` hook once before the first item.

## Example analyzer

`DummyAnalyzer(data_client=...)` comments on files whose line count grew
and on lines longer than 120 bytes. With `request_uast=True` it also says
whether each file has a UAST and which language was detected; with
`request_files_push=True` it analyzes the head files on push events.
`is_binary(content)` reports whether the first 8000 bytes hold a NUL byte;
binary files are not analyzed.

## Local runs

`NoBblfshService` passes requests on to other getters and raises
`NoBblfshError` for requests that want a UAST. `parse_config_json(text)`
turns a JSON object into an analyzer configuration dictionary (numbers
become floats; empty text gives `{}`), and `local_reference(git_dir, hash)`
builds a `file://` reference to a commit of a local repository.

## Configuration

```python
from lookout.config import ConfigError, load_config, parse_duration

try:
    config = load_config("config.yml")
except ConfigError as exc:
    print(exc)

parse_duration("1h30m")   # timedelta(hours=1, minutes=30)
```

Timeouts that the file does not set keep their defaults: 10 minutes for
analyzer reviews, 60 for pushes, 1 for GitHub requests, 20 for git fetches
and 2 for bblfsh parsing. `masked_config(config)` returns a copy safe to
log, with repository tokens replaced by `****`; `enabled_analyzers(config)`
maps the names of analyzers that are not disabled to their configuration,
each checked by `validate_analyzer_config`. `load_web_config(path)` reads
the GitHub application settings and signing key the web front end needs,
raising `ConfigError` for any that is missing.

## What this package does not do

It has no command-line programs and runs no servers: there is no network
transport for the data service or analyzers, no health probes, no GitHub
or JSON provider, no event queue, no database storage of events and
comments, and no web front end. It also does not read git repositories
itself; changes and files come from whatever `ChangeGetter`, `FileGetter`
or transport you supply.