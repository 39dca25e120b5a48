from bitewave.main import main

raise SystemExit(main())
