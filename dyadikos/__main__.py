from dyadikos.app import run

run()
