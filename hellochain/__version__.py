__title__ = "hellochain"
__description__ = "Command-line client for the hello and mech counter programs on a cluster."
__intro__ = "hellochain: say hello to an on-chain program"
__url__ = "https://github.com/l0westbob/hellochain"
__version__ = "1.0.0"
__license__ = "GPLv3"
