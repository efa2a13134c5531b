from django.apps import AppConfig


class ApkRepoConfig(AppConfig):
    name = 'reposerve.apkrepo'
    label = 'apkrepo'
    verbose_name = 'APK repository'

    def ready(self):
        # registers the configuration cache reset on settings changes
        from reposerve.apkrepo import config  # noqa: F401
