"""
Synthesis tests: declarations, wiring, dependencies, variables, outputs and
diagnostics produced from resource graphs.
"""
import os

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")


def _node(node_id, kind, name="", provider="aws", config=None, declaration_type=""):
    from graphform.models.graph import ResourceNode
    return ResourceNode(
        id=node_id, service_kind=kind, provider=provider, display_name=name,
        declaration_type=declaration_type, config=config or {},
    )


def _edge(edge_id, source, target, relationship="connects_to"):
    from graphform.models.graph import RelationshipEdge
    return RelationshipEdge(id=edge_id, source_id=source, target_id=target, relationship_kind=relationship)


def _kinds(output):
    return [d.kind.value for d in output.diagnostics]


class TestS3Expansion:
    def setup_method(self):
        from graphform.synthesis.engine import synthesize
        self.out = synthesize([_node("b", "s3", "Uploads")], [], "aws")

    def test_three_declarations(self):
        assert [d.address for d in self.out.declarations] == [
            "aws_s3_bucket.uploads",
            "aws_s3_bucket_public_access_block.uploads_public_access_block",
            "aws_s3_bucket_versioning.uploads_versioning",
        ]

    def test_default_bucket_name(self):
        assert self.out.declarations[0].fields["bucket"] == "uploads-bucket-001"

    def test_auxiliaries_reference_and_depend_on_bucket(self):
        from graphform.models.values import Reference
        for aux in self.out.declarations[1:]:
            assert aux.fields["bucket"] == Reference("aws_s3_bucket.uploads", "id")
            assert aux.depends_on == ["aws_s3_bucket.uploads"]
            assert aux.role == "auxiliary"
            assert aux.node_id == "b"

    def test_public_access_fully_blocked(self):
        pab = self.out.declarations[1].fields
        for key in ("block_public_acls", "block_public_policy", "ignore_public_acls", "restrict_public_buckets"):
            assert pab[key] is True

    def test_versioning_disabled_by_default(self):
        assert self.out.declarations[2].fields["versioning_configuration"] == {"status": "Disabled"}

    def test_versioning_enabled_from_config(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("b", "s3", "Uploads", config={"versioning": "Enabled"})], [], "aws")
        assert out.find("aws_s3_bucket_versioning.uploads_versioning").fields["versioning_configuration"] == {
            "status": "Enabled"
        }

    def test_name_tag_keeps_display_name(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("b", "s3", "MyBucket")], [], "aws")
        bucket = out.primary_for("b")
        assert bucket.name == "mybucket"
        assert bucket.fields["tags"]["Name"] == "MyBucket"
        assert len(out.declarations) == 3

    def test_outputs_and_variables(self):
        assert set(self.out.variables) == {"environment", "region"}
        assert self.out.variables["region"].default == "us-east-1"
        assert str(self.out.outputs["uploads_bucket_name"].value) == "aws_s3_bucket.uploads.bucket"


class TestLambdaExpansion:
    def setup_method(self):
        from graphform.synthesis.engine import synthesize
        self.out = synthesize([_node("fn", "lambda", "Fn")], [], "aws")
        self.fn = self.out.primary_for("fn")

    def test_four_declarations(self):
        assert [d.address for d in self.out.declarations] == [
            "aws_lambda_function.fn",
            "aws_iam_role.fn_role",
            "aws_iam_role_policy_attachment.fn_basic_execution",
            "data.archive_file.fn_lambda_zip",
        ]

    def test_depends_on_role_and_archive(self):
        assert self.fn.depends_on == ["aws_iam_role.fn_role", "data.archive_file.fn_lambda_zip"]

    def test_role_trusts_lambda_service(self):
        role = self.out.find("aws_iam_role.fn_role")
        statement = role.fields["assume_role_policy"].document["Statement"][0]
        assert statement["Principal"] == {"Service": "lambda.amazonaws.com"}
        assert statement["Action"] == "sts:AssumeRole"

    def test_function_uses_role_and_archive(self):
        from graphform.models.values import Reference
        assert self.fn.fields["role"] == Reference("aws_iam_role.fn_role", "arn")
        assert self.fn.fields["filename"] == Reference("data.archive_file.fn_lambda_zip", "output_path")
        assert self.fn.fields["source_code_hash"] == Reference(
            "data.archive_file.fn_lambda_zip", "output_base64sha256"
        )
        assert "s3_bucket" not in self.fn.fields

    def test_archive_is_a_data_source(self):
        archive = self.out.find("data.archive_file.fn_lambda_zip")
        assert archive.mode == "data"
        assert archive.fields["type"] == "zip"
        assert self.out.needs_archive

    def test_basic_execution_attachment(self):
        attachment = self.out.find("aws_iam_role_policy_attachment.fn_basic_execution")
        assert attachment.fields["policy_arn"].endswith("AWSLambdaBasicExecutionRole")
        assert attachment.depends_on == ["aws_iam_role.fn_role"]

    def test_defaults(self):
        assert self.fn.fields["runtime"] == "nodejs18.x"
        assert self.fn.fields["handler"] == "index.handler"
        assert self.fn.fields["memory_size"] == 128
        assert self.fn.fields["timeout"] == 30
        assert self.fn.fields["function_name"] == "fn-function-001"

    def test_no_code_variables_for_inline_code(self):
        assert "lambda_s3_bucket" not in self.out.variables
        assert set(self.out.outputs) == {"fn_function_name", "fn_arn"}

    def test_s3_code_location(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("fn", "lambda", "Fn", config={"s3_key": "build/fn.zip"})], [], "aws")
        fn = out.primary_for("fn")
        assert str(fn.fields["s3_bucket"]) == "var.lambda_s3_bucket"
        assert fn.fields["s3_key"] == "build/fn.zip"
        assert not out.needs_archive
        assert "lambda_s3_bucket" in out.variables
        assert {"fn_s3_bucket", "fn_s3_key"} <= set(out.outputs)

    def test_user_environment_preserved(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("fn", "lambda", "Fn", config={"environment_variables": {"STAGE": "prod"}})], [], "aws")
        assert out.primary_for("fn").fields["environment"] == {"variables": {"STAGE": "prod"}}


class TestWiring:
    def setup_method(self):
        from graphform.synthesis.engine import synthesize
        nodes = [_node("fn", "lambda", "Fn"), _node("t", "dynamodb", "Table")]
        self.out = synthesize(nodes, [_edge("e1", "fn", "t", "accesses")], "aws")
        self.fn = self.out.primary_for("fn")

    def test_environment_variables_reference_table(self):
        from graphform.models.values import Reference
        variables = self.fn.fields["environment"]["variables"]
        assert variables["TABLE_TABLE_NAME"] == Reference("aws_dynamodb_table.table", "name")
        assert variables["TABLE_TABLE_ARN"] == Reference("aws_dynamodb_table.table", "arn")

    def test_scoped_policy_and_attachment(self):
        from graphform.models.values import Reference
        policy = self.out.find("aws_iam_policy.fn_dynamodb_policy")
        assert policy is not None
        statement = policy.fields["policy"].document["Statement"][0]
        assert "dynamodb:GetItem" in statement["Action"]
        assert "dynamodb:Query" in statement["Action"]
        assert statement["Resource"] == Reference("aws_dynamodb_table.table", "arn")

        attachment = self.out.find("aws_iam_role_policy_attachment.fn_dynamodb_policy_attachment")
        assert attachment.fields["role"] == Reference("aws_iam_role.fn_role", "name")
        assert attachment.fields["policy_arn"] == Reference("aws_iam_policy.fn_dynamodb_policy", "arn")
        assert attachment.depends_on == ["aws_iam_role.fn_role", "aws_iam_policy.fn_dynamodb_policy"]

    def test_target_depends_on_source(self):
        assert self.out.primary_for("t").depends_on == ["aws_lambda_function.fn"]

    def test_non_actionable_relationship_gets_env_but_no_policy(self):
        from graphform.synthesis.engine import synthesize
        nodes = [_node("fn", "lambda", "Fn"), _node("b", "s3", "Logs")]
        out = synthesize(nodes, [_edge("e1", "fn", "b", "connects_to")], "aws")
        assert "LOGS_BUCKET_NAME" in out.primary_for("fn").fields["environment"]["variables"]
        assert out.find("aws_iam_policy.fn_s3_policy") is None

    def test_s3_policy_covers_objects(self):
        from graphform.models.values import Reference, Template
        from graphform.synthesis.engine import synthesize
        nodes = [_node("fn", "lambda", "Fn"), _node("b", "s3", "Logs")]
        out = synthesize(nodes, [_edge("e1", "fn", "b", "accesses")], "aws")
        statement = out.find("aws_iam_policy.fn_s3_policy").fields["policy"].document["Statement"][0]
        assert statement["Resource"] == [
            Reference("aws_s3_bucket.logs", "arn"),
            Template("${aws_s3_bucket.logs.arn}/*"),
        ]

    def test_one_policy_per_target_kind(self):
        from graphform.synthesis.engine import synthesize
        nodes = [
            _node("fn", "lambda", "Fn"),
            _node("a", "dynamodb", "Orders"),
            _node("b", "dynamodb", "Users"),
            _node("q", "sqs", "Jobs"),
        ]
        edges = [
            _edge("e1", "fn", "a", "accesses"),
            _edge("e2", "fn", "b", "accesses"),
            _edge("e3", "fn", "q", "consumes"),
        ]
        out = synthesize(nodes, edges, "aws")
        policies = [d.name for d in out.declarations if d.declaration_type == "aws_iam_policy"]
        assert policies == ["fn_dynamodb_policy", "fn_sqs_policy"]
        statements = out.find("aws_iam_policy.fn_dynamodb_policy").fields["policy"].document["Statement"]
        assert len(statements) == 2

    def test_ec2_gets_role_and_instance_profile_on_demand(self):
        from graphform.models.values import Reference
        from graphform.synthesis.engine import synthesize
        nodes = [_node("web", "ec2", "Web"), _node("b", "s3", "Assets")]
        out = synthesize(nodes, [_edge("e1", "web", "b", "accesses")], "aws")
        web = out.primary_for("web")
        role = out.find("aws_iam_role.web_role")
        assert role.fields["assume_role_policy"].document["Statement"][0]["Principal"] == {
            "Service": "ec2.amazonaws.com"
        }
        assert out.find("aws_iam_instance_profile.web_profile") is not None
        assert web.fields["iam_instance_profile"] == Reference("aws_iam_instance_profile.web_profile", "name")
        assert "aws_iam_instance_profile.web_profile" in web.depends_on
        assert out.find("aws_iam_policy.web_s3_policy") is not None

    def test_ec2_without_edges_has_no_role(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("web", "ec2", "Web")], [], "aws")
        assert [d.address for d in out.declarations] == ["aws_instance.web"]
        assert "iam_instance_profile" not in out.declarations[0].fields

    def test_sns_topic_arn_variable(self):
        from graphform.synthesis.engine import synthesize
        nodes = [_node("fn", "lambda", "Fn"), _node("t", "sns", "Alerts")]
        out = synthesize(nodes, [_edge("e1", "fn", "t", "publishes_to")], "aws")
        assert "ALERTS_TOPIC_ARN" in out.primary_for("fn").fields["environment"]["variables"]
        assert out.find("aws_iam_policy.fn_sns_policy") is not None


class TestSqs:
    def test_dead_letter_queue(self):
        from graphform.models.values import JsonEncode, Reference
        from graphform.synthesis.engine import synthesize
        config = {"dead_letter_queue": True, "max_receive_count": "3"}
        out = synthesize([_node("q", "sqs", "Jobs", config=config)], [], "aws")
        queue = out.primary_for("q")
        assert [d.address for d in out.declarations] == ["aws_sqs_queue.jobs", "aws_sqs_queue.jobs_dlq"]
        assert isinstance(queue.fields["redrive_policy"], JsonEncode)
        assert queue.fields["redrive_policy"].document == {
            "deadLetterTargetArn": Reference("aws_sqs_queue.jobs_dlq", "arn"),
            "maxReceiveCount": 3,
        }
        assert queue.depends_on == ["aws_sqs_queue.jobs_dlq"]

    def test_no_dlq_without_receive_count(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("q", "sqs", "Jobs", config={"dead_letter_queue": True})], [], "aws")
        assert len(out.declarations) == 1
        assert "redrive_policy" not in out.declarations[0].fields

    def test_fifo_queue(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("q", "sqs", "Jobs", config={"name": "jobs", "fifo_queue": "true"})], [], "aws")
        fields = out.declarations[0].fields
        assert fields["name"] == "jobs.fifo"
        assert fields["fifo_queue"] is True


class TestSettings:
    def test_strings_are_coerced(self):
        from graphform.models.settings import LambdaSettings, S3Settings
        assert LambdaSettings.from_config({"memory_size": "256"}).memory_size == 256
        assert S3Settings.from_config({"versioning": "Enabled"}).versioning is True
        assert S3Settings.from_config({"versioning": "disabled"}).versioning is False
        assert S3Settings.from_config({"bucket_name": 42}).bucket_name == "42"

    def test_bad_value_falls_back_to_default(self):
        from graphform.models.settings import LambdaSettings
        s = LambdaSettings.from_config({"memory_size": "lots", "runtime": "python3.12"})
        assert s.memory_size is None
        assert s.runtime == "python3.12"
        assert s.dropped == ["memory_size"]

    def test_nested_bad_value_reported_by_path(self):
        from graphform.models.settings import LambdaSettings
        s = LambdaSettings.from_config({"environment": {"variables": ["A", "B"]}})
        assert s.environment.variables == {}
        assert s.dropped == ["environment.variables"]

    def test_null_and_unknown_keys_are_ignored(self):
        from graphform.models.settings import SqsSettings
        s = SqsSettings.from_config({"delay_seconds": None, "colour": "blue"})
        assert s.delay_seconds is None
        assert s.dropped == []

    def test_parse_settings_without_schema(self):
        from graphform.models.settings import parse_settings
        assert parse_settings("aws", "cloudwatch", {}) is None
        assert parse_settings("gcp", "compute", {"zone": "europe-west1-b"}).zone == "europe-west1-b"


class TestServiceMappings:
    def setup_method(self):
        from graphform.synthesis.engine import synthesize
        self.synthesize = synthesize

    def test_dynamodb_keys_and_billing(self):
        config = {"hash_key": "pk", "range_key": "sk", "billing_mode": "PROVISIONED"}
        fields = self.synthesize([_node("t", "dynamodb", "Orders", config=config)], [], "aws").declarations[0].fields
        assert fields["attribute"] == [{"name": "pk", "type": "S"}, {"name": "sk", "type": "S"}]
        assert fields["read_capacity"] == 5
        assert fields["write_capacity"] == 5

    def test_explicit_zero_is_kept(self):
        config = {"billing_mode": "PROVISIONED", "read_capacity": 0, "write_capacity": "0"}
        fields = self.synthesize([_node("t", "dynamodb", "Orders", config=config)], [], "aws").declarations[0].fields
        assert fields["read_capacity"] == 0
        assert fields["write_capacity"] == 0

    def test_explicit_zero_disk_size_kept_on_gcp(self):
        out = self.synthesize([_node("db", "sql", "Orders", provider="gcp", config={"disk_size": 0})], [], "gcp")
        assert out.declarations[0].fields["settings"]["disk_size"] == 0

    def test_reference_like_user_name_stays_literal(self):
        from graphform.emitters.hcl import render_declaration
        from graphform.models.values import Literal
        out = self.synthesize([_node("b", "s3", "Logs", config={"bucket_name": "aws_logs"})], [], "aws")
        bucket = out.primary_for("b")
        assert bucket.fields["bucket"] == Literal("aws_logs")
        assert '  bucket = "aws_logs"' in render_declaration(bucket).splitlines()

    def test_rds_defaults_to_password_variable(self):
        out = self.synthesize([_node("db", "rds", "Orders DB", config={"engine": "postgres"})], [], "aws")
        fields = out.declarations[0].fields
        assert str(fields["password"]) == "var.db_password"
        assert fields["engine_version"] == "13.7"
        assert out.variables["db_password"].sensitive is True
        assert {"orders_db_endpoint", "orders_db_arn"} <= set(out.outputs)

    def test_alb_uses_network_variables(self):
        out = self.synthesize([_node("lb", "alb", "Front", config={"scheme": "internal"})], [], "aws")
        fields = out.declarations[0].fields
        assert str(fields["subnets"]) == "var.subnet_ids"
        assert fields["internal"] is True
        assert out.variables["subnet_ids"].type == "list(string)"

    def test_vpc_dns_defaults(self):
        fields = self.synthesize([_node("v", "vpc", "Main")], [], "aws").declarations[0].fields
        assert fields["cidr_block"] == "10.0.0.0/16"
        assert fields["enable_dns_hostnames"] is True

    def test_node_declaration_type_overrides_catalog(self):
        out = self.synthesize([_node("lb", "alb", "Front", declaration_type="aws_alb")], [], "aws")
        assert out.declarations[0].address == "aws_alb.front"


class TestDependencies:
    def setup_method(self):
        from graphform.parsers.graph import parse_file
        from graphform.synthesis.engine import synthesize
        graph = parse_file(os.path.join(FIXTURES, "aws_serverless.yaml"))
        self.graph = graph
        self.out = synthesize(graph.nodes, graph.edges, graph.provider)

    def test_every_dependency_is_declared(self):
        from graphform.synthesis.dependencies import missing_dependencies
        assert missing_dependencies(self.out.declarations) == []

    def test_declaration_names_are_unique(self):
        names = [d.name for d in self.out.declarations]
        assert len(names) == len(set(names))

    def test_declaration_count(self):
        assert len(self.out.declarations) == 17

    def test_edge_dependencies_come_first(self):
        fn = self.out.primary_for("fn")
        assert fn.depends_on == [
            "aws_api_gateway_rest_api.api",
            "aws_iam_role.fn_role",
            "data.archive_file.fn_lambda_zip",
        ]

    def test_no_self_dependency(self):
        for d in self.out.declarations:
            assert d.address not in d.depends_on

    def test_self_loop_ignored(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("fn", "lambda", "Fn")], [_edge("e1", "fn", "fn", "invokes")], "aws")
        assert "aws_lambda_function.fn" not in out.primary_for("fn").depends_on
        assert out.diagnostics == []

    def test_merge_keeps_first_occurrence(self):
        from graphform.synthesis.dependencies import merge
        assert merge(["a", "b"], ["b", "c"], ["a"]) == ["a", "b", "c"]


class TestDeterminism:
    def test_same_graph_same_output(self):
        from graphform.emitters.hcl import render_document
        from graphform.parsers.graph import parse_file
        from graphform.synthesis.engine import synthesize
        graph = parse_file(os.path.join(FIXTURES, "aws_serverless.yaml"))
        first = synthesize(graph.nodes, graph.edges, graph.provider)
        second = synthesize(graph.nodes, graph.edges, graph.provider)
        assert first.to_dict() == second.to_dict()
        assert render_document(first) == render_document(second)

    def test_injected_suffix_sequence(self):
        from graphform.synthesis.engine import synthesize
        from graphform.synthesis.naming import SuffixSequence
        out = synthesize([_node("b", "s3", "Logs")], [], "aws", suffixes=SuffixSequence(start=42))
        assert out.declarations[0].fields["bucket"] == "logs-bucket-042"

    def test_input_nodes_not_mutated(self):
        from graphform.synthesis.engine import synthesize
        node = _node("fn", "lambda", "Fn", config={"runtime": "python3.12"})
        synthesize([node], [], "aws")
        assert node.config == {"runtime": "python3.12"}


class TestDiagnostics:
    def setup_method(self):
        from graphform.synthesis.engine import synthesize
        self.synthesize = synthesize

    def test_missing_kind_is_malformed(self):
        out = self.synthesize([_node("x", ""), _node("b", "s3", "Logs")], [], "aws")
        assert _kinds(out) == ["MalformedNode"]
        assert out.diagnostics[0].subject == "x"
        assert out.for_node("x") == []
        assert len(out.declarations) == 3

    def test_unrecognised_kind_is_malformed(self):
        out = self.synthesize([_node("x", "mainframe")], [], "aws")
        assert _kinds(out) == ["MalformedNode"]
        assert out.declarations == []

    def test_duplicate_node_id_is_malformed(self):
        out = self.synthesize([_node("b", "s3", "Logs"), _node("b", "s3", "Other")], [], "aws")
        assert "MalformedNode" in _kinds(out)
        assert len([d for d in out.declarations if d.role == "primary"]) == 1

    def test_dangling_edge(self):
        out = self.synthesize([_node("fn", "lambda", "Fn")], [_edge("e9", "fn", "ghost")], "aws")
        assert _kinds(out) == ["DanglingEdge"]
        assert out.diagnostics[0].subject == "e9"
        assert len(out.declarations) == 4

    def test_kind_without_mapping_passes_config_through(self):
        out = self.synthesize([_node("logs", "cloudwatch", "Logs", config={"retention_in_days": 7})], [], "aws")
        assert _kinds(out) == ["UnknownServiceKind"]
        assert out.declarations[0].address == "aws_cloudwatch_log_group.logs"
        assert out.declarations[0].fields == {"retention_in_days": 7}

    def test_unknown_provider(self):
        node = _node("b", "s3", "Bucket", provider="oracle", declaration_type="oci_objectstorage_bucket",
                     config={"namespace": "acme"})
        out = self.synthesize([node], [], "oracle")
        assert "UnknownProvider" in _kinds(out)
        assert out.declarations[0].fields == {"namespace": "acme"}

    def test_name_collision(self):
        out = self.synthesize([_node("a", "s3", "Logs"), _node("b", "s3", "Logs")], [], "aws")
        assert out.primary_for("a").name == "logs"
        assert out.primary_for("b").name == "logs_2"
        assert "NameCollision" in _kinds(out)
        assert out.find("aws_s3_bucket_versioning.logs_2_versioning") is not None

    def test_non_map_lambda_variables_are_dropped(self):
        out = self.synthesize([_node("fn", "lambda", "Fn", config={"environment": {"variables": "FOO=bar"}})], [], "aws")
        assert len(out.declarations) == 4
        assert out.primary_for("fn").fields["environment"] is None
        assert _kinds(out) == ["MalformedNode"]
        assert "environment.variables" in out.diagnostics[0].message

    def test_kind_case_is_normalised(self):
        node = _node("b", "S3", "MyBucket", declaration_type="aws_s3_bucket")
        out = self.synthesize([node], [], "aws")
        assert out.diagnostics == []
        assert len(out.declarations) == 3
        assert out.primary_for("b").fields["tags"]["Name"] == "MyBucket"
        assert "mybucket_bucket_name" in out.outputs

    def test_output_name_collision(self):
        nodes = [_node("api", "api_gateway", "x"), _node("fn", "lambda", "x execution")]
        out = self.synthesize(nodes, [], "aws")
        assert str(out.outputs["x_execution_arn"].value) == "aws_api_gateway_rest_api.x.execution_arn"
        assert str(out.outputs["x_execution_arn_2"].value) == "aws_lambda_function.x_execution.arn"
        assert "NameCollision" in _kinds(out)

    def test_empty_graph(self):
        out = self.synthesize([], [], "aws")
        assert out.declarations == []
        assert out.diagnostics == []

    def test_diagnostic_to_dict(self):
        out = self.synthesize([_node("x", "")], [], "aws")
        assert out.diagnostics[0].to_dict()["kind"] == "MalformedNode"


class TestOtherProviders:
    def test_gcp_fixture(self):
        from graphform.parsers.graph import parse_file
        from graphform.synthesis.engine import synthesize
        graph = parse_file(os.path.join(FIXTURES, "gcp_web.yaml"))
        out = synthesize(graph.nodes, graph.edges, graph.provider)
        assert [d.address for d in out.declarations] == [
            "google_compute_instance.web",
            "google_storage_bucket.assets",
            "google_sql_database_instance.orders",
        ]
        assert out.variables["region"].default == "us-central1"
        assert "project_id" in out.variables
        web = out.primary_for("vm")
        assert web.fields["machine_type"] == "e2-small"
        assert web.fields["labels"] == {"environment": "terraform-generated"}
        assert out.primary_for("db").fields["settings"]["tier"] == "db-custom-1-3840"
        assert out.primary_for("assets").depends_on == ["google_compute_instance.web"]
        assert out.diagnostics == []

    def test_azure_fixture(self):
        from graphform.models.values import Reference
        from graphform.parsers.graph import parse_file
        from graphform.synthesis.engine import synthesize
        graph = parse_file(os.path.join(FIXTURES, "azure_app.yaml"))
        out = synthesize(graph.nodes, graph.edges, graph.provider)
        app = out.primary_for("app")
        assert app.address == "azurerm_linux_virtual_machine.app"
        assert app.fields["resource_group_name"] == Reference("azurerm_resource_group.main", "name")
        assert str(app.fields["network_interface_ids"]) == "var.network_interface_ids"
        files = out.primary_for("files")
        assert files.fields["name"].isalnum()
        assert files.fields["name"].islower()
        # vnet has a declaration type but no field mapping
        assert "UnknownServiceKind" in _kinds(out)
        assert out.variables["region"].default == "East US"

    def test_azure_resource_group_name_is_reserved(self):
        from graphform.synthesis.engine import synthesize
        out = synthesize([_node("m", "blob", "Main", provider="azure")], [], "azure")
        assert out.primary_for("m").name == "main_2"
        assert "NameCollision" in _kinds(out)

    def test_no_iam_wiring_outside_aws(self):
        from graphform.synthesis.engine import synthesize
        nodes = [_node("vm", "compute", "Web", provider="gcp"), _node("s", "storage", "Assets", provider="gcp")]
        out = synthesize(nodes, [_edge("e1", "vm", "s", "accesses")], "gcp")
        assert len(out.declarations) == 2
