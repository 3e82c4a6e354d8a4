from blogsite.cli import main
from blogsite.frontmatter import split_front_matter
from tests.conftest import write


def test_build_reports_failed_pages(site, capsys):
    code = main(["build", str(site), "--quiet"])
    out = capsys.readouterr().out

    assert code == 1
    assert "broken.md" in out
    assert "[OK] Generated" not in out
    assert (site / "public/index.html").exists()


def test_build_succeeds_without_errors(site, tmp_path):
    (site / "content/posts/broken.md").unlink()
    out_dir = tmp_path / "out"
    code = main(["build", str(site), "-q", "--output", str(out_dir), "--base-url", "https://me.github.io/blog/"])

    assert code == 0
    assert 'href="/blog/posts/second/"' in (out_dir / "index.html").read_text(encoding="utf-8")


def test_build_drafts_flag(site):
    main(["build", str(site), "-q", "--drafts"])
    assert (site / "public/posts/draft/index.html").exists()


def test_build_missing_site(tmp_path, capsys):
    assert main(["build", str(tmp_path / "nowhere"), "-q"]) == 2
    assert "Content directory not found" in capsys.readouterr().out


def test_build_bad_config(site, capsys):
    write(site, "config.yaml", "paginate: zero\n")
    assert main(["build", str(site), "-q"]) == 2
    assert "paginate" in capsys.readouterr().out


def test_new_creates_draft(tmp_path):
    assert main(["new", "posts/deploying-hugo", "--site", str(tmp_path)]) == 0

    target = tmp_path / "content/posts/deploying-hugo.md"
    meta, body = split_front_matter(target.read_text(encoding="utf-8"))
    assert meta["title"] == "Deploying hugo"
    assert meta["draft"] is True
    assert meta["tags"] == []
    assert "<!--more-->" in body


def test_new_with_title_and_no_draft(tmp_path):
    code = main(["new", "posts/x.md", "--site", str(tmp_path), "--title", "Routing in Depth", "--no-draft"])
    assert code == 0
    meta, _ = split_front_matter((tmp_path / "content/posts/x.md").read_text(encoding="utf-8"))
    assert meta["title"] == "Routing in Depth"
    assert meta["draft"] is False


def test_new_refuses_to_overwrite(tmp_path, capsys):
    write(tmp_path, "content/posts/x.md", "keep me")
    assert main(["new", "posts/x.md", "--site", str(tmp_path)]) == 1
    assert "already exists" in capsys.readouterr().out
    assert (tmp_path / "content/posts/x.md").read_text(encoding="utf-8") == "keep me"


def test_new_post_builds(tmp_path):
    main(["new", "posts/hello.md", "--site", str(tmp_path), "--no-draft"])
    assert main(["build", str(tmp_path), "-q"]) == 0
    assert (tmp_path / "public/posts/hello/index.html").exists()
