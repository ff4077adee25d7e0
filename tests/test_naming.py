"""
Tests for naming conventions.
"""

from datetime import datetime, timezone

from fcdeploy import naming


class TestNaming:
    """Tests for derived remote names and logical IDs."""

    def test_service_and_function_names(self):
        """Service and function names embed the stage."""
        assert naming.service_name("my-service", "dev") == "my-service-dev"
        assert naming.function_name("my-service", "dev", "currentTime") == "my-service-dev-currentTime"

    def test_gateway_names(self):
        """API group and API names derive from the service name."""
        assert naming.api_group_name("my-service", "dev") == "my-service-dev-api"
        assert naming.api_name("my-service", "dev", "currentTime") == "sls-http-my-service-dev-currentTime"

    def test_bucket_and_trigger_names(self):
        """Bucket names ignore the stage; trigger names include it."""
        assert naming.bucket_name("my-service") == "sls-my-service"
        assert naming.trigger_name("my-service", "dev", "thumb") == "sls-oss-my-service-dev-thumb"

    def test_function_logical_id_is_stable(self):
        """Logical IDs depend on the function key only."""
        assert naming.function_logical_id("currentTime") == "sls-currentTime-function"
        assert naming.function_logical_id("currentTime") == naming.function_logical_id("currentTime")

    def test_artifact_directory(self):
        """The artifact directory encodes the packaging time in ms and ISO form."""
        when = datetime(2017, 7, 13, 7, 19, 48, 523000, tzinfo=timezone.utc)

        assert (
            naming.artifact_directory("my-service", "dev", when)
            == "serverless/my-service/dev/1499930388523-2017-07-13T07:19:48.523Z"
        )

    def test_artifact_directory_treats_naive_times_as_utc(self):
        """Naive timestamps are interpreted as UTC."""
        naive = datetime(2017, 7, 13, 7, 19, 48, 523000)
        aware = naive.replace(tzinfo=timezone.utc)

        assert naming.artifact_directory("s", "dev", naive) == naming.artifact_directory("s", "dev", aware)

    def test_artifact_file_name(self):
        """Only the last path component is kept."""
        assert naming.artifact_file_name("dist/app.zip") == "app.zip"
        assert naming.artifact_file_name("dist\\win\\app.zip") == "app.zip"
        assert naming.artifact_file_name("app.zip") == "app.zip"
