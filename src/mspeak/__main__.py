from .cli import speak_main

raise SystemExit(speak_main())
