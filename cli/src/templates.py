PULSEFILE_TEMPLATE = '''# Pulsefile - Pulse CI/CD pipeline definition

pipeline {
  name: "build-and-test";
  version: "1.0";

  triggers {
    git {
      on_push: true;
      on_pull_request: true;
      on_merge: true;
      on_tag: false;
      on_release: true;
      on_branch_create: false;
      on_branch_delete: false;
      branches: ["main", "release/*"];
    }
  }

  steps {
    step "install" {
      run: """
        pip install -r requirements.txt
      """;
    }

    step "lint" {
      run: """
        flake8 .
      """;
      allow_failure: true;
    }

    step "test" {
      run: """
        pytest
      """;
    }
  }
}
'''
