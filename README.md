# vulnreach

`vulnreach` works with vulnerability records in the OSV format and finds how
known vulnerabilities are reached from a program: through the packages it
imports, the modules it requires, and the functions it calls.

## Installation

```
pip install vulnreach
```

To run the tests:

```
pip install "vulnreach[test]"
pytest
```

## What it provides

- `vulnreach.osv`: dataclasses for OSV entries (`Entry`, `Affected`,
  `AffectsRange`, `RangeEvent`, `EcosystemSpecificImport`, ...), with
  `loads` and `dumps` for JSON, plus `Entry.to_dict` and `Entry.from_dict`.
- `vulnreach.fileurl`: `url_to_file_path` and `url_from_file_path` convert
  between `file:` URLs and absolute paths, following POSIX or Windows rules.
  They raise `FileURLError` when the conversion is not possible.
- `vulnreach.model`: the analysis data model. It has `Module` and `Package`
  for the code under analysis. It has the graphs `ImportGraph`,
  `RequireGraph` and `CallGraph` with their nodes (`PkgNode`, `ModNode`,
  `FuncNode`, `CallSite`), and a `Result` that ties detected `Vuln`s to
  those graphs. `is_std_package` reports whether an import path belongs to
  the standard library.
- `vulnreach.modvulns`: `ModuleVulnerabilities` holds the vulnerabilities
  for each module. Its `filter` method keeps only those that apply to the
  module version and platform. `vulns_for_package` and `vulns_for_symbol`
  answer lookups.
- `vulnreach.slicing`: builds the import and requires slices that lead to
  vulnerable packages (`new_result`, `vuln_package_module_slice`,
  `set_modules`).
- `vulnreach.witness`: extracts representative witnesses from a `Result`.
  `import_chains` returns the shortest import chains, and `call_stacks`
  returns call stacks ranked by how easy they are to understand.

## Example

```python
from vulnreach import osv
from vulnreach.witness import import_chains

entry = osv.loads('{"id": "VA", "details": "", "affected": []}')
print(osv.dumps(entry))

# result: a vulnreach.model.Result produced by the slicing step
for vuln, chains in import_chains(result).items():
    for chain in chains:
        print(vuln.pkg_path, " -> ".join(node.path for node in chain))
```