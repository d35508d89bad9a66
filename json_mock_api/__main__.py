from __future__ import annotations

from json_mock_api.cli import main

raise SystemExit(main())
