"""Go release compatibility checking.

Runs `go vet` (or `go build` / `go test`) on a set of packages once per Go release installed
in the SDK directory (`~/sdk`, as populated by `golang.org/dl`), and reports the releases the
packages are not compatible with.

Dependency-free: only the standard library and the installed Go releases are required.
"""
