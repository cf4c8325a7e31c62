from sys import exit

from .cli import main

exit(main())
