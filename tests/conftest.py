import os

from nodestate.conf import UNITTESTS_SETTINGS_FILEPATH

os.environ['NODESTATE_CONFIG_YAML'] = os.environ.get('NODESTATE_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)
