from appinfo.cli import main

raise SystemExit(main())
